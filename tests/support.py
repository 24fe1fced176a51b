from __future__ import annotations

import threading
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer


@dataclass
class CannedResponse:
    status: int = 200
    content_type: str = "application/json"
    body: bytes = b"[]"
    content_length: int | None = None


@dataclass
class RecordedRequest:
    method: str
    path: str
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)


class RenderServer:
    """Local HTTP server answering every request with one canned response."""

    def __init__(self, response: CannedResponse | None = None) -> None:
        self.response = response or CannedResponse()
        self.requests: list[RecordedRequest] = []
        owner = self

        class Handler(BaseHTTPRequestHandler):
            def _handle(self) -> None:
                length = int(self.headers.get("Content-Length") or 0)
                body = self.rfile.read(length) if length else b""
                owner.requests.append(
                    RecordedRequest(
                        method=self.command,
                        path=self.path,
                        body=body,
                        headers=dict(self.headers.items()),
                    )
                )
                resp = owner.response
                self.send_response(resp.status)
                if resp.content_type:
                    self.send_header("Content-Type", resp.content_type)
                length = len(resp.body) if resp.content_length is None else resp.content_length
                self.send_header("Content-Length", str(length))
                self.end_headers()
                self.wfile.write(resp.body)

            do_GET = _handle
            do_POST = _handle
            do_PUT = _handle
            do_get = _handle
            do_post = _handle

            def log_message(self, format: str, *args: object) -> None:
                pass

        self._server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def endpoint(self) -> str:
        host, port = self._server.server_address[:2]
        return f"http://{host}:{port}"

    def __enter__(self) -> "RenderServer":
        self._thread.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._server.shutdown()
        self._server.server_close()
        self._thread.join(timeout=5)


def unused_endpoint() -> str:
    server = ThreadingHTTPServer(("127.0.0.1", 0), BaseHTTPRequestHandler)
    host, port = server.server_address[:2]
    server.server_close()
    return f"http://{host}:{port}"
