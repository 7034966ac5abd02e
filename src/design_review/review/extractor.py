from __future__ import annotations

import json
from typing import Any, Dict, Optional, Tuple

from design_review import logger as logger_mod

from .errors import MalformedPayloadError, NoStructuredPayloadError, SchemaViolationError
from .schema import validate

log = logger_mod.get_logger()


def locate_payload(text: str) -> Tuple[int, int]:
    """Return the [start, end) span of the first balanced top-level JSON object.

    Braces inside JSON strings do not count toward nesting.
    """

    first = text.find("{")
    if first < 0:
        raise NoStructuredPayloadError("No JSON object found in model output")

    # A stray "{" in prose never closes; try the next opening brace.
    start = first
    while start >= 0:
        end = _match_brace(text, start)
        if end is not None:
            return start, end
        start = text.find("{", start + 1)

    raise MalformedPayloadError("unterminated object", position=first)


def _match_brace(text: str, start: int) -> Optional[int]:
    depth = 0
    in_string = False
    escape = False
    for i in range(start, len(text)):
        ch = text[i]
        if escape:
            escape = False
            continue
        if in_string:
            if ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
    return None


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def parse_payload(text: str) -> Any:
    """Locate and strictly parse the JSON object in `text`."""

    start, end = locate_payload(text)
    try:
        return json.loads(text[start:end], parse_constant=_reject_constant)
    except RecursionError as e:
        raise MalformedPayloadError("payload nested too deeply", position=start) from e
    except json.JSONDecodeError as e:
        raise MalformedPayloadError(e.msg, position=start + e.pos) from e
    except ValueError as e:
        raise MalformedPayloadError(str(e), position=start) from e


def extract(raw_text: str) -> Dict[str, Any]:
    """Turn raw model text into a schema-valid review.

    Leading or trailing prose around the JSON object is ignored. Values are
    never coerced: anything off-schema raises ``SchemaViolationError``.
    """

    candidate = parse_payload(raw_text or "")
    result = validate(candidate)
    if not result.ok:
        log.debug("Extracted payload has %d violation(s)", len(result.violations))
        raise SchemaViolationError(result.violations)
    return result.value
