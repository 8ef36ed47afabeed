"""JSON Schema for the encoded canonical event."""
import json
import os
from functools import lru_cache

from jsonschema import Draft7Validator

SCHEMA_PATH = os.getenv(
    "CANONICAL_SCHEMA_PATH",
    os.path.join(os.path.dirname(os.path.dirname(__file__)), "schemas", "canonical_event.json"),
)


@lru_cache(maxsize=1)
def load_schema() -> dict:
    with open(SCHEMA_PATH, "r") as f:
        return json.load(f)


def validate_event(payload: dict) -> None:
    """Raise jsonschema.ValidationError if ``payload`` is not a valid encoded event."""
    Draft7Validator(load_schema()).validate(payload)

