"""
config.yaml schema check.

The loaded YAML mapping is checked against schemas/<name>.schema.json
before any key is read, so a typo'd key or a bad layout name stops the run
with exit code 2 instead of being silently ignored.
"""

import json
from pathlib import Path

import jsonschema

from diffpreview.errors import ConfigError

SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"

_schemas: dict[str, dict] = {}


class ValidationError(ConfigError):
    """Config data doesn't match its schema."""

    def __init__(self, schema_name: str, message: str, path: str = None):
        self.schema_name = schema_name
        self.path = path
        super().__init__(f"[{schema_name}] {message}" + (f" at {path}" if path else ""))


def _schema(name: str) -> dict:
    if name not in _schemas:
        schema_path = SCHEMAS_DIR / f"{name}.schema.json"
        if not schema_path.exists():
            raise ValidationError(name, f"Schema file not found: {schema_path}")
        _schemas[name] = json.loads(schema_path.read_text())
    return _schemas[name]


def validate(data: dict, schema_name: str) -> None:
    """Raise ValidationError naming the first offending key, e.g. `[config] ... at layout`."""
    try:
        jsonschema.validate(instance=data, schema=_schema(schema_name))
    except jsonschema.ValidationError as e:
        key = ".".join(str(p) for p in e.absolute_path) or "(root)"
        raise ValidationError(schema_name, e.message, key) from None
