from __future__ import annotations

import logging
import math
import time
from typing import Any, Callable
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .errors import TransportError
from .http import HttpClient
from .models import ScriptedQuery
from .validate import validate_content

logger = logging.getLogger(__name__)


def parse_delay(value: Any) -> float:
    """Convert a configured delay in seconds into a non-negative float."""

    if isinstance(value, bool):
        raise ValueError(f"invalid delay {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("s"):
            text = text[:-1]
        try:
            seconds = float(text)
        except ValueError:
            raise ValueError(f"invalid delay {value!r}") from None
    else:
        raise ValueError(f"invalid delay {value!r}")
    if math.isnan(seconds) or math.isinf(seconds) or seconds < 0:
        raise ValueError(f"invalid delay {value!r}")
    return seconds


def build_url(endpoint: str, path: str) -> str:
    """
    Join endpoint and path and re-encode the request target.

    Query parameters are sorted by key; repeated keys keep their relative
    order and blank values are preserved.
    """

    parts = urlsplit(endpoint + path)
    if parts.scheme not in {"http", "https"}:
        raise ValueError(f"unsupported scheme {parts.scheme!r}")
    if not parts.hostname:
        raise ValueError("missing host")
    # Raises ValueError on an out of range or non-numeric port.
    _ = parts.port

    params = sorted(parse_qsl(parts.query, keep_blank_values=True), key=lambda kv: kv[0])
    return urlunsplit((parts.scheme, parts.netloc, parts.path or "/", urlencode(params), ""))


class QueryExecutor:
    def __init__(
        self,
        *,
        client: HttpClient | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client or HttpClient()
        self._sleep = sleep

    def execute(self, query: ScriptedQuery) -> list[str]:
        failures: list[str] = []

        try:
            delay = parse_delay(query.delay)
        except ValueError as exc:
            failures.append(f"failed parse duration: {exc}")
            return failures
        if delay:
            self._sleep(delay)

        try:
            url = build_url(query.endpoint, query.path)
        except ValueError as exc:
            failures.append(f"failed to parse URL: {exc}")
            return failures

        method = query.method
        body = None if method == "GET" else query.body.encode("utf-8")

        logger.info(
            "sending request endpoint=%s original_URL=%s url=%s method=%s",
            query.endpoint,
            query.path,
            url,
            method,
        )

        try:
            resp = self._client.open(method, url, body=body)
        except TransportError as exc:
            failures.append(f"failed to perform the request: {exc}")
            return failures

        with resp:
            expected = query.expected
            if resp.status_code != expected.http_code:
                failures.append(
                    f"unexpected status code, got {resp.status_code}, expected {expected.http_code}"
                )

            content_type = resp.content_type()
            if content_type != expected.content_type:
                failures.append(
                    f"unexpected content-type, got {content_type}, expected {expected.content_type}"
                )

            try:
                raw = resp.read()
            except Exception as exc:
                failures.append(f"failed to read body: {exc.__class__.__name__}: {exc}")
                return failures

        failures.extend(validate_content(content_type, raw, expected.first_result()))
        return failures
