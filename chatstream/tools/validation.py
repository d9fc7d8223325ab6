"""
Tool-argument validation derived from a tool's JSON schema.

Only the property types the model is expected to fill are enforced; unknown
property types accept anything, extra keys always pass through and values
are never coerced.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import jsonschema
from jsonschema.exceptions import best_match

_SCALAR_TYPES = ("string", "number", "integer", "boolean")
_ARRAY_ITEM_TYPES = ("string", "number")

_ANY_OBJECT: dict = {"type": "object"}


@dataclass
class ParseResult:
    success: bool
    data: Any = None
    error: str | None = None


def _property_schema(prop: Any) -> dict:
    if not isinstance(prop, Mapping):
        return {}
    kind = prop.get("type")
    if kind in _SCALAR_TYPES:
        return {"type": kind}
    if kind == "array":
        items = prop.get("items")
        item_type = items.get("type") if isinstance(items, Mapping) else None
        if item_type in _ARRAY_ITEM_TYPES:
            return {"type": "array", "items": {"type": item_type}}
        return {"type": "array"}
    return {}


def _derive_schema(schema: Any) -> dict:
    if not isinstance(schema, Mapping):
        return _ANY_OBJECT
    properties = schema.get("properties")
    if schema.get("type") != "object" or not isinstance(properties, Mapping):
        return _ANY_OBJECT

    required = [
        key for key in (schema.get("required") or []) if key in properties
    ]
    derived: dict = {
        "type": "object",
        "properties": {
            key: _property_schema(prop) for key, prop in properties.items()
        },
        "additionalProperties": True,
    }
    if required:
        derived["required"] = required
    return derived


class ParamValidator:
    """Validates tool-call arguments against a derived schema."""

    def __init__(self, schema: dict) -> None:
        self.schema = schema
        self._validator = jsonschema.Draft202012Validator(schema)

    def safe_parse(self, data: Any) -> ParseResult:
        error = best_match(self._validator.iter_errors(data))
        if error is not None:
            return ParseResult(success=False, error=str(error.message))
        return ParseResult(success=True, data=data)


def schema_to_validator(schema: Any) -> ParamValidator:
    """Build a ``ParamValidator`` for *schema* (any value; never raises)."""
    return ParamValidator(_derive_schema(schema))
