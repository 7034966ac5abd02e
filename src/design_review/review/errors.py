from __future__ import annotations

from typing import List, Optional

from design_review.llm.errors import LLMError

from .schema import Violation


class ExtractionError(LLMError):
    """Raised when raw model text cannot be turned into a review."""

    kind = "ExtractionError"


class NoStructuredPayloadError(ExtractionError):
    """The raw text contains no JSON object at all."""

    kind = "NoStructuredPayload"


class MalformedPayloadError(ExtractionError):
    """A payload was found but is not valid JSON."""

    kind = "MalformedPayload"

    def __init__(self, reason: str, position: Optional[int] = None):
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"Malformed JSON payload{where}: {reason}")
        self.reason = reason
        self.position = position


class SchemaViolationError(ExtractionError):
    """The payload parsed but broke one or more field constraints."""

    kind = "SchemaViolation"

    def __init__(self, violations: List[Violation]):
        listed = "; ".join(str(v) for v in violations)
        super().__init__(f"Model output violates the review schema: {listed}")
        self.violations = list(violations)
