from __future__ import annotations


class E2EError(Exception):
    """Base class for errors raised by the harness itself."""


class MalformedSampleError(E2EError, ValueError):
    def __init__(self, message: str, *, raw: object | None = None) -> None:
        self.message = message
        self.raw = raw
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.raw is None:
            return self.message
        return f"{self.message} (got {self.raw!r})"


class ConfigError(E2EError):
    def __init__(self, message: str, *, path: str | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class TransportError(E2EError):
    def __init__(self, message: str, *, url: str | None = None) -> None:
        self.message = message
        self.url = url
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.url:
            return f"{self.url}: {self.message}"
        return self.message
