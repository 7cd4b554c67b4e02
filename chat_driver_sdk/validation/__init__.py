"""Validation of structured model output."""

from .constrained import ConstrainedResponseValidator
from .json_schema import parse_json_reply, schema_errors, strip_additional_properties

__all__ = [
    "ConstrainedResponseValidator",
    "parse_json_reply",
    "schema_errors",
    "strip_additional_properties",
]
