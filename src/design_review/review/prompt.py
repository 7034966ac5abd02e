from __future__ import annotations

from typing import Iterable

from .schema import Violation

_TEMPLATE = """You are a senior Product/UX design critic.
Task: Review a UI/graphic design and return ONLY structured JSON.

Design context:
- File: "{artifact_name}" ({artifact_kind})
- User brief: "{brief}"

Rules:
- Be concise but actionable.
- Consider visual hierarchy, typography, color, accessibility, usability.
- Include emotional/brand feel and product value alignment.
- Respond in the exact JSON format described below. No extra text.

{instructions}"""


def assemble(
    brief: str, artifact_name: str, artifact_kind: str, instructions: str
) -> str:
    """Merge the request context with the format instructions.

    The instruction block always comes last so the output contract is the
    model's most recent context. Callers reject an empty brief before this.
    """

    return _TEMPLATE.format(
        brief=brief,
        artifact_name=artifact_name,
        artifact_kind=artifact_kind,
        instructions=instructions.strip(),
    )


def build_corrective_prompt(prompt: str, violations: Iterable[Violation]) -> str:
    """Append the violations of a rejected answer to the original prompt."""

    listed = "\n".join(f"- {v}" for v in violations)
    return (
        f"{prompt}\n\n"
        "Your previous answer did not match the schema:\n"
        f"{listed}\n"
        "Return the corrected JSON object only."
    )
