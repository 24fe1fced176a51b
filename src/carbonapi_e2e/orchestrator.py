from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from .executor import QueryExecutor
from .models import ManagedApp, ScriptedQuery
from .process import ProcessLauncher
from .report import QueryResult, SuiteReport, Timer, epoch_ms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunOptions:
    skip_apps: bool = False
    grace_period_s: float = 5.0
    stop_timeout_s: float = 10.0


class Launcher(Protocol):
    def start(self, app: ManagedApp) -> object: ...

    def stop(self, handle: object) -> None: ...


class Executor(Protocol):
    def execute(self, query: ScriptedQuery) -> list[str]: ...


class Orchestrator:
    def __init__(
        self,
        *,
        options: RunOptions | None = None,
        launcher: Launcher | None = None,
        executor: Executor | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._options = options or RunOptions()
        self._launcher = launcher
        self._executor = executor or QueryExecutor(sleep=sleep)
        self._sleep = sleep

    def _get_launcher(self) -> Launcher:
        if self._launcher is None:
            self._launcher = ProcessLauncher(stop_timeout=self._options.stop_timeout_s)
        return self._launcher

    def run(self, apps: Sequence[ManagedApp], queries: Sequence[ScriptedQuery]) -> SuiteReport:
        started = epoch_ms()
        logger.info("will run test apps=%d queries=%d skip_apps=%s", len(apps), len(queries), self._options.skip_apps)

        running: dict[str, object] = {}
        if not self._options.skip_apps:
            running = self._start_apps(apps)
            logger.info("will sleep for %s seconds to start all required apps", self._options.grace_period_s)
            self._sleep(self._options.grace_period_s)

        results: list[QueryResult] = []
        try:
            for index, query in enumerate(queries, start=1):
                results.append(self._run_query(index, query))
        finally:
            if running:
                logger.info("shutting down running applications")
                self._stop_apps(running)

        report = SuiteReport(results=results, started_at_epoch_ms=started, finished_at_epoch_ms=epoch_ms())
        if report.failed:
            logger.error("tests failed counts=%s", report.counts())
        else:
            logger.info("All tests OK")
        return report

    def _start_apps(self, apps: Sequence[ManagedApp]) -> dict[str, object]:
        launcher = self._get_launcher()
        running: dict[str, object] = {}

        def start(app: ManagedApp) -> None:
            try:
                running[app.name] = launcher.start(app)
            except Exception:
                logger.exception("failed to start app name=%s", app.name)

        if not apps:
            return running
        with ThreadPoolExecutor(max_workers=len(apps), thread_name_prefix="app-start") as pool:
            list(pool.map(start, apps))
        return running

    def _stop_apps(self, running: dict[str, object]) -> None:
        launcher = self._get_launcher()
        for name, handle in running.items():
            try:
                launcher.stop(handle)
            except Exception:
                logger.exception("failed to stop app name=%s", name)

    def _run_query(self, index: int, query: ScriptedQuery) -> QueryResult:
        timer = Timer()
        try:
            failures = self._executor.execute(query)
        except Exception as exc:
            logger.exception("query #%d raised", index)
            failures = [f"unhandled error: {exc.__class__.__name__}: {exc}"]

        if failures:
            logger.error("test failed query=%s failures=%s", query.describe(), failures)
        else:
            logger.info("test OK query=%s", query.describe())

        return QueryResult(
            index=index,
            method=query.method,
            endpoint=query.endpoint,
            path=query.path,
            failures=list(failures),
            duration_ms=timer.elapsed_ms(),
        )


def run_suite(
    apps: Sequence[ManagedApp],
    queries: Sequence[ScriptedQuery],
    skip_apps: bool,
    *,
    launcher: Launcher | None = None,
    executor: Executor | None = None,
    grace_period_s: float = 5.0,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Run every scripted query and return True when the suite failed."""

    orchestrator = Orchestrator(
        options=RunOptions(skip_apps=skip_apps, grace_period_s=grace_period_s),
        launcher=launcher,
        executor=executor,
        sleep=sleep,
    )
    return orchestrator.run(apps, queries).failed
