"""Service record contract.

A service record is the JSON file written per service:

    {"name": ..., "importedFrom": ..., "documents": {<type>: {"fetch": ..., "select": ...}}}

This module defines the JSON Schemas for a single document entry and for a
whole record, plus the validation helpers used by the import cycle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from jsonschema import Draft202012Validator

from docimport.errors import ValidationFailure


_DOCUMENT: Dict[str, Any] = {
    "type": "object",
    "required": ["fetch", "select"],
    "properties": {
        "fetch": {"type": "string", "pattern": r"^https?://\S+$"},
        "select": {"type": "string", "minLength": 1},
        "filter": {"type": "array", "items": {"type": "string", "minLength": 1}},
        "remove": {"type": "string", "minLength": 1},
    },
    "additionalProperties": False,
}


DOCUMENT_SCHEMA: Dict[str, Any] = {"$schema": "https://json-schema.org/draft/2020-12/schema", **_DOCUMENT}


def build_service_schema(doc_types: Iterable[str]) -> Dict[str, Any]:
    """Record-level schema; document keys must be recognized types."""
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "required": ["name", "documents"],
        "properties": {
            "name": {"type": "string", "minLength": 1},
            "importedFrom": {"type": "string", "minLength": 1},
            "documents": {
                "type": "object",
                "minProperties": 1,
                "propertyNames": {"enum": sorted(doc_types)},
                "additionalProperties": _DOCUMENT,
            },
        },
        "additionalProperties": True,
    }


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    errors: List[str] = field(default_factory=list)


def validate(schema: Dict[str, Any], value: Any) -> ValidationResult:
    """Validate `value`; errors are human-readable "path: message" strings."""
    errors = []
    for e in sorted(Draft202012Validator(schema).iter_errors(value), key=lambda x: list(map(str, x.path))):
        path = ".".join(str(p) for p in e.path) if e.path else "<root>"
        errors.append(f"{path}: {e.message}")
    return ValidationResult(ok=not errors, errors=errors)


def validate_document(document: Dict[str, Any]) -> ValidationResult:
    return validate(DOCUMENT_SCHEMA, document)


def assert_valid(schema: Dict[str, Any], value: Any) -> None:
    result = validate(schema, value)
    if not result.ok:
        raise ValidationFailure("Schema validation failed", result.errors)
