from __future__ import annotations

from typing import Any

from jsonschema import Draft202012Validator

RENDER_RESPONSE_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "carbonapi-e2e://schemas/render_response.schema.json",
    "type": "array",
    "items": {"$ref": "#/$defs/series"},
    "$defs": {
        "series": {
            "type": "object",
            "required": ["target", "datapoints"],
            "properties": {
                "target": {"type": "string"},
                "datapoints": {
                    "type": ["array", "null"],
                    "items": {"$ref": "#/$defs/datapoint"},
                },
                "tags": {
                    "type": ["object", "null"],
                    "additionalProperties": {"type": "string"},
                },
            },
        },
        "datapoint": {
            "type": "array",
            "minItems": 2,
            "maxItems": 2,
        },
    },
}

_VALIDATOR = Draft202012Validator(RENDER_RESPONSE_SCHEMA)


def _json_path(err: object) -> str:
    path = getattr(err, "absolute_path", None)
    if not path:
        return "$"
    out = "$"
    for part in path:
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}"
    return out


def validate_render_response(instance: Any) -> list[str]:
    """Return JSONPath-prefixed schema violations for a decoded render response."""

    errors = sorted(_VALIDATOR.iter_errors(instance), key=lambda e: list(getattr(e, "absolute_path", [])))
    return [f"{_json_path(e)}: {e.message}" for e in errors]
