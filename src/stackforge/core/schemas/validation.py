"""Shared schema validation utilities.

stackforge validates configuration files, project profiles, and per-feature
configuration maps using JSON Schema. Bundled schemas are stored as YAML
(JSON Schema expressed in YAML) under ``stackforge.data/schemas/``.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List, Mapping

from jsonschema import Draft202012Validator

from stackforge.core.exceptions import SchemaValidationError
from stackforge.core.utils.io import read_yaml
from stackforge.data import get_data_path


@lru_cache(maxsize=16)
def _load_bundled_schema(schema_name: str) -> Dict[str, Any]:
    schema_path = get_data_path("schemas", schema_name)
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema not found: {schema_name} (searched {schema_path.parent})")
    schema = read_yaml(schema_path, default=None, raise_on_error=True)
    if not isinstance(schema, dict):
        raise ValueError(f"Schema must be a YAML mapping, got {type(schema).__name__}")
    return schema


def load_schema(schema_name: str) -> Dict[str, Any]:
    """Load a bundled schema by name.

    Automatically appends ``.yaml`` if no extension is present.

    Raises:
        FileNotFoundError: If schema file doesn't exist.
        ValueError: If schema is not a YAML mapping.
    """
    lowered = schema_name.lower()
    if not (lowered.endswith(".yaml") or lowered.endswith(".yml")):
        schema_name = f"{schema_name}.yaml"
    return _load_bundled_schema(schema_name)


def schema_errors(payload: Any, schema: Mapping[str, Any]) -> List[str]:
    """Return readable error messages for ``payload`` against ``schema``.

    Messages are ordered by instance path and prefixed with the dotted path
    when the error is not at the document root.
    """
    validator = Draft202012Validator(dict(schema))
    errors: List[str] = []
    for error in sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.path]):
        if error.path:
            path_str = ".".join(str(p) for p in error.path)
            errors.append(f"{path_str}: {error.message}")
        else:
            errors.append(error.message)
    return errors


def validate_payload(payload: Any, schema_name: str) -> None:
    """Validate a payload against a bundled schema.

    Raises:
        SchemaValidationError: If validation fails.
        FileNotFoundError: If schema doesn't exist.
    """
    errors = schema_errors(payload, load_schema(schema_name))
    if errors:
        raise SchemaValidationError(
            f"Validation failed against schema '{schema_name}': {'; '.join(errors)}",
            errors=errors,
        )


__all__ = [
    "load_schema",
    "schema_errors",
    "validate_payload",
]
