"""Structured design review.

Public API:
- ReviewPipeline / review
- PipelineResult, PipelineState, PipelineError, PipelinePolicy, CancelToken
- REVIEW_SCHEMA, validate
- compile_instructions, get_format_instructions
- assemble
- extract
"""

from .errors import (
    ExtractionError,
    MalformedPayloadError,
    NoStructuredPayloadError,
    SchemaViolationError,
)
from .extractor import extract
from .instructions import compile_instructions, get_format_instructions
from .pipeline import (
    CancelToken,
    PipelineError,
    PipelinePolicy,
    PipelineResult,
    PipelineState,
    ReviewPipeline,
    review,
)
from .prompt import assemble
from .schema import REVIEW_SCHEMA, ValidationResult, Violation, validate

__all__ = [
    "CancelToken",
    "ExtractionError",
    "MalformedPayloadError",
    "NoStructuredPayloadError",
    "PipelineError",
    "PipelinePolicy",
    "PipelineResult",
    "PipelineState",
    "REVIEW_SCHEMA",
    "ReviewPipeline",
    "SchemaViolationError",
    "ValidationResult",
    "Violation",
    "assemble",
    "compile_instructions",
    "extract",
    "get_format_instructions",
    "review",
    "validate",
]
