"""Review schema: the contract every accepted model response satisfies."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError as _SchemaValidationError

SCORE_FIELDS = (
    "visual_hierarchy",
    "typography",
    "color",
    "accessibility",
    "usability",
)
SCORE_MIN = 0
SCORE_MAX = 10

PRIORITY_FIXES_BOUNDS = (3, 7)
SUGGESTIONS_BOUNDS = (3, 10)

# Non-empty and not whitespace-only.
NON_BLANK = r"\S"


def _score() -> Dict[str, Any]:
    return {"type": "number", "minimum": SCORE_MIN, "maximum": SCORE_MAX}


def _text_list(bounds: tuple[int, int]) -> Dict[str, Any]:
    return {
        "type": "array",
        "items": {"type": "string"},
        "minItems": bounds[0],
        "maxItems": bounds[1],
    }


REVIEW_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "summary": {
            "type": "string",
            "pattern": NON_BLANK,
            "description": "One paragraph high-level critique",
        },
        "scores": {
            "type": "object",
            "properties": {
                **{name: _score() for name in SCORE_FIELDS},
                "emotional_tone": {
                    "type": "string",
                    "pattern": NON_BLANK,
                    "description": "Single word or short phrase",
                },
            },
            "required": [*SCORE_FIELDS, "emotional_tone"],
            "additionalProperties": False,
        },
        "product_value": {
            "type": "string",
            "pattern": NON_BLANK,
            "description": "How design supports business/product value",
        },
        "priority_fixes": _text_list(PRIORITY_FIXES_BOUNDS),
        "suggestions": _text_list(SUGGESTIONS_BOUNDS),
    },
    "required": [
        "summary",
        "scores",
        "product_value",
        "priority_fixes",
        "suggestions",
    ],
    "additionalProperties": False,
}

_VALIDATOR = Draft202012Validator(REVIEW_SCHEMA)
_REQUIRED_RE = re.compile(r"^'([^']+)' is a required property")


@dataclass(frozen=True)
class Violation:
    """One failed field constraint.

    `field` is a dotted path ("scores.color", "priority_fixes.0"); the empty
    string refers to the document itself.
    """

    field: str
    constraint: str
    message: str

    def __str__(self) -> str:
        where = self.field or "<root>"
        return f"{where}: {self.message}"


@dataclass(frozen=True)
class ValidationResult:
    value: Optional[Dict[str, Any]] = None
    violations: List[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations


def _field_path(error: _SchemaValidationError) -> str:
    path = [str(p) for p in error.absolute_path]
    # "required" errors sit on the parent; name the missing child instead.
    if error.validator == "required":
        match = _REQUIRED_RE.match(error.message)
        if match:
            path.append(match.group(1))
    return ".".join(path)


def _describe(error: _SchemaValidationError) -> str:
    bound = error.validator_value
    if error.validator == "minItems":
        return f"expected at least {bound} items, got {len(error.instance)}"
    if error.validator == "maxItems":
        return f"expected at most {bound} items, got {len(error.instance)}"
    if error.validator == "minimum":
        return f"must be >= {bound}, got {error.instance!r}"
    if error.validator == "maximum":
        return f"must be <= {bound}, got {error.instance!r}"
    if error.validator == "required":
        return "required field is missing"
    if error.validator == "pattern" and bound == NON_BLANK:
        return "must be non-empty text"
    if error.validator == "type":
        return f"expected {bound}, got {type(error.instance).__name__}"
    return error.message


def collect_violations(
    candidate: Any, schema: Dict[str, Any] | None = None
) -> List[Violation]:
    """Return every schema violation in `candidate`, sorted by field path."""

    validator = _VALIDATOR if schema is None else Draft202012Validator(schema)
    violations = [
        Violation(
            field=_field_path(err),
            constraint=str(err.validator),
            message=_describe(err),
        )
        for err in validator.iter_errors(candidate)
    ]
    return sorted(violations, key=lambda v: (v.field, v.constraint, v.message))


def validate(
    candidate: Any, schema: Dict[str, Any] | None = None
) -> ValidationResult:
    """Check presence, type, numeric bounds and list lengths.

    All violations are collected, not just the first. The candidate is never
    modified.
    """

    violations = collect_violations(candidate, schema)
    if violations:
        return ValidationResult(violations=violations)
    return ValidationResult(value=candidate)
