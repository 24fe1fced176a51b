from __future__ import annotations

__all__ = [
    "__version__",
    "E2EError",
    "ConfigError",
    "MalformedSampleError",
    "TransportError",
    "run",
]

__version__ = "0.1.0"

from .errors import ConfigError, E2EError, MalformedSampleError, TransportError  # noqa: E402
from .api import run  # noqa: E402
