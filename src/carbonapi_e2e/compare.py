from __future__ import annotations

import math

from .models import MetricSeries, Sample


def _render(points: list[Sample]) -> str:
    return "[" + " ".join(f"{{{p.timestamp} {p.value!r}}}" for p in points) + "]"


def _same_value(left: float, right: float) -> bool:
    if math.isnan(left) and math.isnan(right):
        return True
    return left == right


def _step(points: list[Sample]) -> int:
    return points[1].timestamp - points[0].timestamp


def compare_metrics(observed: MetricSeries, expected: MetricSeries) -> list[str]:
    """
    Compare an observed series against the expected one.

    Returns human readable mismatch descriptions; an empty list means the two
    series are equal. Checks stop at the first kind of mismatch found.
    """

    if observed.target != expected.target:
        return [f"target mismatch, got '{observed.target}', expected '{expected.target}'"]

    if len(observed.points) != len(expected.points):
        return [
            f"series '{expected.target}' has unexpected length, got {len(observed.points)} "
            f"'{_render(observed.points)}', expected {len(expected.points)} '{_render(expected.points)}'"
        ]

    if len(observed.points) > 1:
        got_step = _step(observed.points)
        want_step = _step(expected.points)
        if got_step != want_step:
            return [f"series '{expected.target}' has unexpected step, got '{got_step}', expected '{want_step}'"]

    for got, want in zip(observed.points, expected.points):
        if not _same_value(got.value, want.value) or got.timestamp != want.timestamp:
            return [
                f"data in series '{expected.target}' is different, got '{_render(observed.points)}', "
                f"expected '{_render(expected.points)}'"
            ]

    return []
