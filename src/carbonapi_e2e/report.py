from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any
from xml.etree import ElementTree as ET


def epoch_ms() -> int:
    return int(time.time() * 1000)


class Timer:
    def __init__(self) -> None:
        self._start = time.perf_counter()

    def elapsed_ms(self) -> int:
        return int((time.perf_counter() - self._start) * 1000)


@dataclass(frozen=True)
class QueryResult:
    index: int
    method: str
    endpoint: str
    path: str
    failures: list[str] = field(default_factory=list)
    duration_ms: int | None = None

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def name(self) -> str:
        return f"{self.method.upper()} {self.path or '/'}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "method": self.method,
            "endpoint": self.endpoint,
            "path": self.path,
            "ok": self.ok,
            "failures": list(self.failures),
            "duration_ms": self.duration_ms,
        }


@dataclass(frozen=True)
class SuiteReport:
    results: list[QueryResult]
    started_at_epoch_ms: int
    finished_at_epoch_ms: int

    @property
    def failed(self) -> bool:
        return any(not r.ok for r in self.results)

    @property
    def ok(self) -> bool:
        return not self.failed

    def counts(self) -> dict[str, int]:
        passed = sum(1 for r in self.results if r.ok)
        return {"PASS": passed, "FAIL": len(self.results) - passed}

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "counts": self.counts(),
            "started_at_epoch_ms": self.started_at_epoch_ms,
            "finished_at_epoch_ms": self.finished_at_epoch_ms,
            "results": [r.to_dict() for r in self.results],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=False) + "\n"

    def to_text(self) -> str:
        lines = [f"counts={self.counts()} ok={self.ok}"]
        for r in self.results:
            status = "PASS" if r.ok else "FAIL"
            lines.append(f"- {status} #{r.index} {r.name} ({r.endpoint})")
            for failure in r.failures:
                lines.append(f"    - {failure}")
        return "\n".join(lines) + "\n"

    def to_junit_xml(self) -> str:
        suite = ET.Element(
            "testsuite",
            name="carbonapi-e2e",
            tests=str(len(self.results)),
            failures=str(self.counts()["FAIL"]),
            time=f"{(self.finished_at_epoch_ms - self.started_at_epoch_ms) / 1000:.3f}",
        )
        for r in self.results:
            case = ET.SubElement(
                suite,
                "testcase",
                classname=r.endpoint,
                name=f"{r.index:03d} {r.name}",
                time=f"{(r.duration_ms or 0) / 1000:.3f}",
            )
            if r.failures:
                failure = ET.SubElement(case, "failure", message=r.failures[0])
                failure.text = "\n".join(r.failures)
        return ET.tostring(suite, encoding="unicode") + "\n"
