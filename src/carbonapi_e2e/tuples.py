"""Decoding of ``[value, timestamp]`` datapoint pairs into typed samples."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Sequence

from .errors import MalformedSampleError

if TYPE_CHECKING:
    from .models import Sample

_OPENING = "[("
_CLOSING = "])"
_INFINITE_LITERALS = frozenset({"inf", "infinity"})


def _parse_value(raw: Any) -> float:
    if isinstance(raw, bool):
        raise MalformedSampleError("failed to parse Value", raw=raw)
    if isinstance(raw, float):
        return raw
    if isinstance(raw, int):
        try:
            return float(raw)
        except OverflowError:
            raise MalformedSampleError("failed to parse Value: out of range", raw=raw) from None
    if isinstance(raw, str):
        text = raw.strip()
        if text and "_" not in text:
            try:
                value = float(text)
            except ValueError:
                raise MalformedSampleError("failed to parse Value", raw=raw) from None
            # Only an explicit inf literal may decode to infinity.
            if math.isinf(value) and text.lstrip("+-").lower() not in _INFINITE_LITERALS:
                raise MalformedSampleError("failed to parse Value: out of range", raw=raw)
            return value
    raise MalformedSampleError("failed to parse Value", raw=raw)


def _parse_timestamp(raw: Any) -> int:
    if isinstance(raw, bool):
        raise MalformedSampleError("failed to parse Timestamp", raw=raw)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        if text and "_" not in text:
            try:
                return int(text, 10)
            except ValueError:
                pass
    raise MalformedSampleError("failed to parse Timestamp", raw=raw)


def _sample(value: float, timestamp: int) -> "Sample":
    from .models import Sample

    return Sample(value=value, timestamp=timestamp)


def decode_pair(items: Sequence[Any]) -> "Sample":
    """
    Decode an already split pair, as found in YAML scenario files or parsed JSON.

    The first element is always the value and the second the timestamp.
    """

    if isinstance(items, (str, bytes)) or not isinstance(items, Sequence):
        raise MalformedSampleError("datapoint must be a two-element list", raw=items)
    if len(items) != 2:
        raise MalformedSampleError(
            f"too many parameters in the Datapoint, got {len(items)}, expected 2", raw=list(items)
        )
    value = _parse_value(items[0])
    timestamp = _parse_timestamp(items[1])
    return _sample(value, timestamp)


def decode_embedded(text: str) -> "Sample":
    """Decode a bracketed ``"[value,timestamp]"`` string."""

    if isinstance(text, bytes):
        text = text.decode("utf-8")
    pieces = text.strip().split(",")
    if len(pieces) != 2:
        raise MalformedSampleError(
            f"too many parameters in the Datapoint, got {len(pieces)}, expected 2", raw=text
        )
    value_str = pieces[0].strip()
    ts_str = pieces[1].strip()
    if not value_str or value_str[0] not in _OPENING:
        raise MalformedSampleError("missing opening bracket", raw=text)
    if not ts_str or ts_str[-1] not in _CLOSING:
        raise MalformedSampleError("missing closing bracket", raw=text)

    value = _parse_value(value_str[1:])
    timestamp = _parse_timestamp(ts_str[:-1])
    return _sample(value, timestamp)


def encode_pair(sample: "Sample") -> list[float | int]:
    return [sample.value, sample.timestamp]
