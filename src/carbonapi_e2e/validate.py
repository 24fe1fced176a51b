from __future__ import annotations

import base64
import hashlib
import json
import logging

from pydantic import ValidationError

from .compare import compare_metrics
from .models import ExpectedResult, MetricSeries
from .schemas import validate_render_response

logger = logging.getLogger(__name__)

IMAGE_CONTENT_TYPES = frozenset({"image/png", "image/svg+xml"})
JSON_CONTENT_TYPE = "application/json"


def media_type(content_type: str) -> str:
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def _validate_hash(body: bytes, expected: ExpectedResult) -> list[str]:
    digest = hashlib.sha256(body).hexdigest()
    for candidate in expected.hashes:
        if digest == candidate.strip().lower():
            return []
    encoded = base64.b64encode(body).decode("ascii")
    return [f"sha256 mismatch, got '{digest}', expected '{list(expected.hashes)}', encodedBody: '{encoded}'"]


def _decode_series(body: bytes) -> tuple[list[MetricSeries] | None, list[str]]:
    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        return None, [f"failed to parse response '{exc.__class__.__name__}: {exc}'"]

    schema_errors = validate_render_response(payload)
    if schema_errors:
        return None, ["failed to parse response: " + "; ".join(schema_errors)]

    try:
        return [MetricSeries.model_validate(item) for item in payload], []
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or '$'}: {err['msg']}" for err in exc.errors()
        )
        return None, [f"failed to parse response: {details}"]


def _validate_metrics(body: bytes, expected: ExpectedResult) -> list[str]:
    observed, failures = _decode_series(body)
    if observed is None:
        return failures

    if len(observed) != len(expected.metrics):
        return [f"unexpected amount of results, got {len(observed)}, expected {len(expected.metrics)}"]

    for got, want in zip(observed, expected.metrics):
        for mismatch in compare_metrics(got, want):
            failures.append(f"metrics are not equal: {mismatch}")
    return failures


def validate_content(content_type: str, body: bytes, expected: ExpectedResult) -> list[str]:
    """
    Validate a response body according to its observed content type.

    Images are matched by SHA-256 digest against the candidate hashes, JSON
    bodies are decoded as render responses and compared series by series.
    """

    kind = media_type(content_type)
    if kind in IMAGE_CONTENT_TYPES:
        return _validate_hash(body, expected)
    if kind == JSON_CONTENT_TYPE:
        return _validate_metrics(body, expected)
    logger.debug("Not inspecting body of unsupported content-type %r", content_type)
    return [f"unsupported content-type: got '{content_type}'"]
