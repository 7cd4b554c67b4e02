from __future__ import annotations

import copy
import json
import re
from typing import Any, Dict, List

from jsonschema import Draft202012Validator

_FENCE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL)


def schema_errors(data: Any, schema: Dict[str, Any]) -> List[str]:
    """Return human-readable validation errors (empty when ``data`` is valid)."""
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    return [
        f"{' -> '.join(str(p) for p in e.path) or 'root'}: {e.message}"
        for e in errors
    ]


def parse_json_reply(text: str) -> Any:
    """Decode a JSON reply, tolerating a surrounding markdown code fence."""
    match = _FENCE.match(text)
    if match:
        text = match.group(1)
    return json.loads(text)


def strip_additional_properties(schema: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``schema`` without ``additionalProperties`` at any depth.

    Gemini response schemas reject the keyword.
    """
    def _strip(node: Any) -> Any:
        if isinstance(node, dict):
            return {k: _strip(v) for k, v in node.items() if k != "additionalProperties"}
        if isinstance(node, list):
            return [_strip(item) for item in node]
        return node

    return _strip(copy.deepcopy(schema))
