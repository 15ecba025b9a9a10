"""JSON Schema helpers for stackforge."""
from __future__ import annotations

from .validation import load_schema, schema_errors, validate_payload

__all__ = ["load_schema", "schema_errors", "validate_payload"]
