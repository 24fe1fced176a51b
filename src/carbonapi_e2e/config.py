from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigError
from .models import TestSchema

logger = logging.getLogger(__name__)


def _format_validation_error(exc: ValidationError) -> str:
    parts: list[str] = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{location}: {err['msg']}")
    return "; ".join(parts)


def parse_suite(document: Any, *, source: str | None = None) -> TestSchema:
    """
    Build a TestSchema from an already parsed document.

    The apps/queries may sit at the top level or under a ``test`` key.
    """

    if document is None:
        raise ConfigError("empty scenario document", path=source)
    if not isinstance(document, dict):
        raise ConfigError(f"expected a mapping at the document root, got {type(document).__name__}", path=source)
    if "test" in document:
        document = document["test"]
        if not isinstance(document, dict):
            raise ConfigError("'test' must be a mapping", path=source)
    try:
        return TestSchema.model_validate(document)
    except ValidationError as exc:
        raise ConfigError(_format_validation_error(exc), path=source) from exc


def load_suite_text(text: str, *, source: str | None = None) -> TestSchema:
    yaml = YAML(typ="safe", pure=True)
    try:
        document = yaml.load(io.StringIO(text))
    except YAMLError as exc:
        raise ConfigError(f"invalid YAML: {exc}", path=source) from exc
    return parse_suite(document, source=source)


def load_suite(path: str | Path) -> TestSchema:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read scenario file: {exc.strerror or exc}", path=str(path)) from exc
    suite = load_suite_text(text, source=str(path))
    logger.debug("loaded scenario path=%s apps=%d queries=%d", path, len(suite.apps), len(suite.queries))
    return suite
