from __future__ import annotations

import http.client
import urllib.error
import urllib.request
from typing import Any

from .errors import TransportError


class HttpResponse:
    """An open response; the body is only read on demand."""

    def __init__(self, *, url: str, status_code: int, headers: dict[str, str], stream: Any) -> None:
        self.url = url
        self.status_code = status_code
        self.headers = headers
        self._stream = stream

    def header(self, name: str) -> str:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return ""

    def content_type(self) -> str:
        return self.header("Content-Type")

    def read(self) -> bytes:
        return self._stream.read()

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "HttpResponse":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class HttpClient:
    """
    Minimal urllib based client.

    No timeout and no retries are applied: a request either completes or
    blocks for as long as the server holds it.
    """

    def __init__(self) -> None:
        self._opener = urllib.request.build_opener()

    def open(self, method: str, url: str, *, body: bytes | None = None) -> HttpResponse:
        request = urllib.request.Request(url=url, data=body, method=method)

        try:
            response = self._opener.open(request, timeout=None)
        except urllib.error.HTTPError as exc:
            return HttpResponse(url=url, status_code=exc.code, headers=dict(exc.headers.items()), stream=exc)
        except urllib.error.URLError as exc:
            raise TransportError(str(exc.reason), url=url) from exc
        except (http.client.HTTPException, OSError, ValueError) as exc:
            raise TransportError(f"{exc.__class__.__name__}: {exc}", url=url) from exc

        return HttpResponse(
            url=response.geturl(),
            status_code=response.getcode(),
            headers=dict(response.headers.items()),
            stream=response,
        )
