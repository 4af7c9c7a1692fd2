"""Argument parsing helpers for the signal-plan CLI."""

from __future__ import annotations

import argparse
import re
from pathlib import Path
from typing import Any, Mapping, Optional

from ..core.models import WEEKDAYS
from ..exporters import exporters_registry
from ..settings import WatchOptions
from .workflows import _handle_graphics, _handle_parse, _handle_phase, _handle_watch

_CLOCK_ARGUMENT = re.compile(r"^\d{2}:\d{2}(:\d{2})?$", re.ASCII)


def clock_argument(value: str) -> str:
    """Validate ``HH:MM[:SS]`` arguments and normalise them to ``HH:MM:SS``."""

    text = value.strip()
    if not _CLOCK_ARGUMENT.match(text):
        raise argparse.ArgumentTypeError(f"expected HH:MM or HH:MM:SS, got {value!r}")
    hours, minutes, *rest = (int(part) for part in text.split(":"))
    seconds = rest[0] if rest else 0
    if hours > 23 or minutes > 59 or seconds > 59:
        raise argparse.ArgumentTypeError(f"clock time out of range: {value!r}")
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def _add_source_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "source",
        help=(
            "Timing-plan PDF, text dump (.txt), exported JSON plan, URL or "
            "plan identifier fetched from the configured base URL."
        ),
    )


def build_parser(config: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    config = dict(config or {})
    logging_cfg_raw = config.get("logging", {})
    logging_cfg = dict(logging_cfg_raw) if isinstance(logging_cfg_raw, Mapping) else {}
    watch_options = WatchOptions.from_config(config)

    parser = argparse.ArgumentParser(
        prog="signal-plan",
        description="Traffic-signal timing plans: parse tables and query the active phase.",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to the pyproject.toml holding [tool.signal_plan] settings.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=logging_cfg.get("level", "info"),
        help="Logging level (e.g. debug, info, warning).",
    )
    parser.add_argument(
        "--log-output",
        dest="log_output",
        default=logging_cfg.get("output", "stderr"),
        help="Logging destination (stdout, stderr or a file path).",
    )
    parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=("json", "text"),
        default=logging_cfg.get("format", "json"),
        help="Logging formatter (json or text).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_parser = subparsers.add_parser(
        "parse",
        help="Extract the timing definitions and weekly schedule of a plan.",
    )
    _add_source_argument(parse_parser)
    parse_parser.add_argument(
        "--format",
        choices=sorted(exporters_registry),
        default="json",
        help="Output format (default: json).",
    )
    parse_parser.add_argument(
        "--no-images",
        dest="no_images",
        action="store_true",
        help="Omit the PNG data URLs of tagged graphics from JSON output.",
    )
    parse_parser.set_defaults(handler=_handle_parse)

    phase_parser = subparsers.add_parser(
        "phase",
        help="Show the active phase and the seconds remaining in it.",
    )
    _add_source_argument(phase_parser)
    phase_parser.add_argument(
        "--at",
        type=clock_argument,
        default=None,
        help="Clock time to query as HH:MM[:SS] (default: now).",
    )
    phase_parser.add_argument(
        "--weekday",
        type=int,
        choices=WEEKDAYS,
        default=None,
        help="Weekday to query, 1=Monday ... 7=Sunday (default: today).",
    )
    phase_parser.add_argument(
        "--format",
        choices=("json", "text"),
        default="json",
        help="Output format (default: json).",
    )
    phase_parser.set_defaults(handler=_handle_phase)

    graphics_parser = subparsers.add_parser(
        "graphics",
        help="List page graphics with their timing type and phase tags.",
    )
    _add_source_argument(graphics_parser)
    graphics_parser.add_argument(
        "--format",
        choices=("json", "text"),
        default="text",
        help="Output format (default: text).",
    )
    graphics_parser.set_defaults(handler=_handle_graphics)

    watch_parser = subparsers.add_parser(
        "watch",
        help="Print the active phase repeatedly until interrupted.",
    )
    _add_source_argument(watch_parser)
    watch_parser.add_argument(
        "--interval",
        type=float,
        default=watch_options.interval,
        help="Seconds between updates (default: watch.interval or 1).",
    )
    watch_parser.add_argument(
        "--count",
        type=int,
        default=None,
        help="Stop after this many updates (default: run until interrupted).",
    )
    watch_parser.set_defaults(handler=_handle_watch)

    return parser


__all__ = ["build_parser", "clock_argument"]
