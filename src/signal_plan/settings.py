"""Runtime option models parsed from TOML configuration."""

from __future__ import annotations

from collections.abc import Mapping as ABCMapping
from dataclasses import dataclass
from typing import Any, Mapping

from .core.timing_table import SCHEDULE_CODE_RULES

__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT",
    "DEFAULT_WATCH_INTERVAL",
    "ParserOptions",
    "SourceOptions",
    "WatchOptions",
]

DEFAULT_BASE_URL = "https://www.ttcx.dot.gov.taipei/cpt/api/TimingPlan/pdf/"
DEFAULT_TIMEOUT = 30.0
DEFAULT_WATCH_INTERVAL = 1.0
DEFAULT_SCHEDULE_CODES = "numeric"


def _section(config: Mapping[str, Any] | None, name: str) -> Mapping[str, Any]:
    if not isinstance(config, ABCMapping):
        return {}
    value = config.get(name)
    if isinstance(value, ABCMapping):
        return value
    return {}


def _coerce_positive_float(value: Any, fallback: float) -> float:
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return fallback
    if numeric <= 0.0:
        return fallback
    return numeric


@dataclass(frozen=True, slots=True)
class ParserOptions:
    """Timing-table parser switches from the ``[parser]`` table."""

    schedule_codes: str = DEFAULT_SCHEDULE_CODES

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None = None) -> "ParserOptions":
        section = _section(config, "parser")
        raw = str(section.get("schedule_codes", DEFAULT_SCHEDULE_CODES)).strip().lower()
        if raw not in SCHEDULE_CODE_RULES:
            raw = DEFAULT_SCHEDULE_CODES
        return cls(schedule_codes=raw)

    def as_kwargs(self) -> dict[str, str]:
        return {"schedule_codes": self.schedule_codes}


@dataclass(frozen=True, slots=True)
class SourceOptions:
    """Where and how remote timing-plan documents are fetched."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None = None) -> "SourceOptions":
        section = _section(config, "source")
        base_url = str(section.get("base_url") or DEFAULT_BASE_URL).strip()
        if not base_url.endswith("/"):
            base_url += "/"
        return cls(
            base_url=base_url,
            timeout=_coerce_positive_float(section.get("timeout"), DEFAULT_TIMEOUT),
        )


@dataclass(frozen=True, slots=True)
class WatchOptions:
    interval: float = DEFAULT_WATCH_INTERVAL

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None = None) -> "WatchOptions":
        section = _section(config, "watch")
        return cls(
            interval=_coerce_positive_float(section.get("interval"), DEFAULT_WATCH_INTERVAL)
        )
