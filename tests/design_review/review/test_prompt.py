def test_assemble_with_defaults_ends_with_instructions():
    from design_review.review.instructions import get_format_instructions
    from design_review.review.prompt import assemble

    instructions = get_format_instructions()
    text = assemble("Evaluate login form accessibility", "no-file", "unknown", instructions)

    assert '"no-file"' in text
    assert "(unknown)" in text
    assert "Evaluate login form accessibility" in text
    assert text.endswith(instructions)


def test_assemble_places_context_before_instructions():
    from design_review.review.prompt import assemble

    text = assemble("Check contrast", "login.png", "image/png", "FORMAT BLOCK")

    assert text.index("login.png") < text.index("FORMAT BLOCK")
    assert text.index("image/png") < text.index("FORMAT BLOCK")
    assert text.index("Check contrast") < text.index("FORMAT BLOCK")


def test_assemble_keeps_braces_in_brief_literal():
    from design_review.review.prompt import assemble

    text = assemble("Use {brand} colors", "a.png", "image/png", "FORMAT")

    assert "Use {brand} colors" in text


def test_build_corrective_prompt_lists_violations():
    from design_review.review.prompt import build_corrective_prompt
    from design_review.review.schema import Violation

    violations = [
        Violation("priority_fixes", "minItems", "expected at least 3 items, got 2")
    ]

    text = build_corrective_prompt("ORIGINAL", violations)

    assert text.startswith("ORIGINAL")
    assert "- priority_fixes: expected at least 3 items, got 2" in text
