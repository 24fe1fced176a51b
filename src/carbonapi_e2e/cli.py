from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from carbonapi_e2e import __version__
from carbonapi_e2e.report import SuiteReport

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def _write_output(report: SuiteReport, *, fmt: str, out_path: str | None) -> None:
    if fmt == "json":
        text = report.to_json()
    elif fmt == "junit":
        text = report.to_junit_xml()
    else:
        text = report.to_text()

    if out_path is None:
        sys.stdout.write(text)
        return
    Path(out_path).write_text(text, encoding="utf-8")
    sys.stdout.write(f"Wrote report: {out_path}\n")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="carbonapi-e2e")
    parser.add_argument("--version", action="version", version=f"carbonapi-e2e {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run an end-to-end scenario file")
    run.add_argument("--config", required=True, help="Path to the YAML scenario file")
    run.add_argument("--noapp", action="store_true", help="Do not start the apps listed in the scenario")
    run.add_argument("--grace-period", type=float, default=5.0, help="Seconds to wait after starting apps")
    run.add_argument("--stop-timeout", type=float, default=10.0, help="Seconds to wait for an app to exit")
    run.add_argument("--format", default="text", choices=["text", "json", "junit"])
    run.add_argument("--out", type=str, help="Write report to file instead of stdout")
    run.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    from carbonapi_e2e.api import run as run_suite
    from carbonapi_e2e.errors import ConfigError
    from carbonapi_e2e.orchestrator import RunOptions

    options = RunOptions(
        skip_apps=args.noapp,
        grace_period_s=args.grace_period,
        stop_timeout_s=args.stop_timeout,
    )
    try:
        report = run_suite(args.config, options=options)
    except ConfigError as exc:
        logging.getLogger(__name__).error("failed to load scenario: %s", exc)
        return EXIT_CONFIG

    _write_output(report, fmt=args.format, out_path=args.out)
    return EXIT_FAILED if report.failed else EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
