from __future__ import annotations

from pathlib import Path

from carbonapi_e2e.config import load_suite
from carbonapi_e2e.orchestrator import Orchestrator, RunOptions
from carbonapi_e2e.report import SuiteReport


def run(config_path: str | Path, *, options: RunOptions | None = None) -> SuiteReport:
    """
    Run a scenario file programmatically.

    Loads the file, starts the configured apps unless ``options.skip_apps`` is
    set, runs every query in order and returns the report.
    """

    suite = load_suite(config_path)
    orchestrator = Orchestrator(options=options or RunOptions())
    return orchestrator.run(suite.apps, suite.queries)
