"""Render output-format instructions from a JSON Schema.

The rendered text is deterministic for a given schema, so it is compiled once
per process and reused for every prompt.
"""

from __future__ import annotations

import functools
import json
from typing import Any, Dict, List

from .schema import NON_BLANK, REVIEW_SCHEMA

_PREAMBLE = (
    "Respond with a single JSON object and nothing else: no markdown outside "
    "the object, no comments, no trailing commas.\n"
    "Your output will be parsed and type-checked against the schema below, so "
    "every field must match it exactly."
)


def _describe_field(spec: Dict[str, Any]) -> str:
    kind = spec.get("type", "any")
    parts: List[str] = []

    if kind == "number":
        parts.append("number")
        if "minimum" in spec and "maximum" in spec:
            parts.append(f"between {spec['minimum']} and {spec['maximum']} inclusive")
    elif kind == "string":
        parts.append("non-empty string" if spec.get("pattern") == NON_BLANK else "string")
    elif kind == "array":
        item_type = spec.get("items", {}).get("type", "any")
        parts.append(f"array of {item_type}s")
        if "minItems" in spec and "maxItems" in spec:
            parts.append(f"with {spec['minItems']} to {spec['maxItems']} items")
    elif kind == "object":
        parts.append("object")
    else:
        parts.append(str(kind))

    text = " ".join(parts)
    if spec.get("description"):
        text += f" ({spec['description']})"
    return text


def _field_rules(schema: Dict[str, Any], prefix: str = "") -> List[str]:
    required = set(schema.get("required", []))
    lines: List[str] = []
    for name, spec in schema.get("properties", {}).items():
        path = f"{prefix}{name}"
        flag = "required" if name in required else "optional"
        lines.append(f'- "{path}": {_describe_field(spec)}, {flag}')
        if spec.get("type") == "object":
            lines.extend(_field_rules(spec, prefix=f"{path}."))
    return lines


def compile_instructions(schema: Dict[str, Any]) -> str:
    """Return the formatting instructions for `schema`.

    Same schema in, same text out: field order follows the schema and the
    embedded JSON is dumped with a fixed indent.
    """

    rules = "\n".join(_field_rules(schema))
    schema_json = json.dumps(schema, indent=2, ensure_ascii=False)
    return (
        f"{_PREAMBLE}\n\n"
        f"Fields:\n{rules}\n"
        "No other fields are allowed.\n\n"
        "Here is the JSON Schema your output must adhere to:\n"
        f"```json\n{schema_json}\n```"
    )


@functools.lru_cache(maxsize=None)
def get_format_instructions() -> str:
    """Instructions for the review schema, compiled once per process."""
    return compile_instructions(REVIEW_SCHEMA)
