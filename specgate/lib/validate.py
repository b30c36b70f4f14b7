"""
JSON Schema validation for persisted documents.

Schemas live in specgate/schemas/<name>.schema.json and are compiled
into a validator once per process.
"""

import json
from functools import lru_cache
from pathlib import Path

import jsonschema
from jsonschema.exceptions import best_match

SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"


class ValidationError(Exception):
    """A document did not match its schema."""

    def __init__(self, schema_name: str, message: str, path: str = None):
        self.schema_name = schema_name
        self.path = path
        super().__init__(f"[{schema_name}] {message}" + (f" at {path}" if path else ""))


@lru_cache(maxsize=None)
def get_validator(schema_name: str):
    """Load, check and compile the named schema."""
    schema_path = SCHEMAS_DIR / f"{schema_name}.schema.json"
    if not schema_path.is_file():
        raise ValidationError(schema_name, f"No schema at {schema_path}")

    schema = json.loads(schema_path.read_text(encoding="utf-8"))
    validator_cls = jsonschema.validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def validate(data, schema_name: str) -> None:
    """Raise ValidationError for the most relevant violation, if any.

    The error path is dotted (testify.assertion_hash), or "(root)".
    """
    error = best_match(get_validator(schema_name).iter_errors(data))
    if error is None:
        return
    path = ".".join(str(p) for p in error.absolute_path) or "(root)"
    raise ValidationError(schema_name, error.message, path)
