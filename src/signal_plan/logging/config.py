"""Logging configuration for the signal-plan command line tools."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional, TextIO

__all__ = ["JsonFormatter", "setup_logging", "LOGGER_NAME"]

LOGGER_NAME = "signal_plan"

_DEFAULT_LEVEL = "info"
_DEFAULT_OUTPUT = "stderr"
_DEFAULT_FORMAT = "json"
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_HANDLER_MARKER = "_signal_plan_handler"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    if isinstance(value, Path):
        return str(value)
    return repr(value)


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key in _RESERVED_ATTRIBUTES or key.startswith("_"):
                continue
            payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=False, default=_json_default)


def _resolve_level(value: Any) -> int:
    if isinstance(value, int):
        return value
    name = str(value or _DEFAULT_LEVEL).strip().upper()
    level = logging.getLevelName(name)
    if isinstance(level, int):
        return level
    raise ValueError(f"Unknown logging level {value!r}")


def _build_handler(output: str) -> logging.Handler:
    streams: Mapping[str, TextIO] = {"stdout": sys.stdout, "stderr": sys.stderr}
    target = output.strip() or _DEFAULT_OUTPUT
    stream = streams.get(target.lower())
    if stream is not None:
        return logging.StreamHandler(stream)
    path = Path(target).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, encoding="utf-8")


def setup_logging(
    config: Optional[Mapping[str, Any]] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> logging.Logger:
    """Configure the package logger from the ``[logging]`` table of ``config``.

    The table accepts ``level`` (default ``info``), ``output`` (``stdout``,
    ``stderr`` or a file path) and ``format`` (``json`` or ``text``).  Calling
    the helper again replaces the handler installed by a previous call.
    """

    section: Mapping[str, Any] = {}
    if config:
        raw = config.get("logging", {})
        if isinstance(raw, Mapping):
            section = raw

    target = logger or logging.getLogger(LOGGER_NAME)
    level = _resolve_level(section.get("level", _DEFAULT_LEVEL))
    fmt = str(section.get("format", _DEFAULT_FORMAT)).strip().lower()
    if fmt not in {"json", "text"}:
        raise ValueError(f"Unknown logging format {fmt!r}; expected 'json' or 'text'")

    handler = _build_handler(str(section.get("output", _DEFAULT_OUTPUT)))
    handler.setFormatter(JsonFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT))
    setattr(handler, _HANDLER_MARKER, True)

    for existing in list(target.handlers):
        if getattr(existing, _HANDLER_MARKER, False):
            target.removeHandler(existing)
            existing.close()
    target.addHandler(handler)
    target.setLevel(level)
    return target
