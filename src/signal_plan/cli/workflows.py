"""Sub-command handlers for the signal-plan CLI."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from ..core.models import PhaseDescriptor
from ..core.phase import clock_key
from ..exporters import exporters_registry
from ..processing import (
    TimingPlan,
    descriptor_to_payload,
    graphic_to_payload,
    plan_to_payload,
)
from ..settings import WatchOptions
from .errors import CliError
from .io import load_plan

__all__ = [
    "describe_phase",
    "format_phase_line",
    "_handle_graphics",
    "_handle_parse",
    "_handle_phase",
    "_handle_watch",
]

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _query_key(namespace: argparse.Namespace, clock: Clock) -> tuple[str, int]:
    now_time, now_weekday = clock_key(clock())
    at = getattr(namespace, "at", None)
    weekday = getattr(namespace, "weekday", None)
    return at or now_time, weekday or now_weekday


def describe_phase(
    plan: TimingPlan, time_text: str, weekday: int, descriptor: PhaseDescriptor
) -> dict[str, Any]:
    payload: dict[str, Any] = {"time": time_text, "weekday": weekday}
    payload.update(descriptor_to_payload(descriptor))
    graphic = plan.graphic_for(descriptor)
    payload["graphic"] = graphic.sequence_key if graphic is not None else None
    return payload


def format_phase_line(time_text: str, weekday: int, descriptor: PhaseDescriptor) -> str:
    if descriptor.is_indeterminate:
        return f"{time_text} day {weekday}: no active phase"
    return (
        f"{time_text} day {weekday}: {descriptor.type_code} {descriptor.phase_type} "
        f"phase {descriptor.phase_index} remaining {descriptor.remaining_seconds}s"
    )


def _handle_parse(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    plan = load_plan(namespace.source, config)
    fmt = getattr(namespace, "format", "json")
    include_images = fmt == "json" and not getattr(namespace, "no_images", False)
    payload = plan_to_payload(plan, include_images=include_images)
    unresolved = plan.table.unresolved_types()
    if unresolved:
        logger.warning(
            "Schedule references undefined timing types",
            extra={"event": "cli.unresolved_types", "types": list(unresolved)},
        )
    return exporters_registry[fmt](payload)


def _handle_phase(
    namespace: argparse.Namespace,
    *,
    config: Mapping[str, Any],
    clock: Optional[Clock] = None,
) -> str:
    plan = load_plan(namespace.source, config)
    time_text, weekday = _query_key(namespace, clock or datetime.now)
    descriptor = plan.phase(time_text, weekday)
    if getattr(namespace, "format", "json") == "text":
        return format_phase_line(time_text, weekday, descriptor)
    payload = describe_phase(plan, time_text, weekday, descriptor)
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _handle_graphics(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    plan = load_plan(namespace.source, config)
    if getattr(namespace, "format", "text") == "json":
        return json.dumps(
            [graphic_to_payload(graphic) for graphic in plan.graphics],
            indent=2,
            ensure_ascii=False,
        )
    if not plan.graphics:
        return "No graphics found."
    lines = ["page  key     type  index  size"]
    for graphic in plan.graphics:
        lines.append(
            f"{graphic.page:<5} {graphic.sequence_key:<7} {graphic.type_code or '-':<5} "
            f"{graphic.occurrence_index if graphic.occurrence_index is not None else '-':<6} "
            f"{graphic.image.width}x{graphic.image.height}"
        )
    return "\n".join(lines)


def _handle_watch(
    namespace: argparse.Namespace,
    *,
    config: Mapping[str, Any],
    clock: Optional[Clock] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> str:
    plan = load_plan(namespace.source, config)
    clock = clock or datetime.now
    sleep = sleep or time.sleep
    interval = getattr(namespace, "interval", None) or WatchOptions.from_config(config).interval
    count: Optional[int] = getattr(namespace, "count", None)
    if count is not None and count <= 0:
        raise CliError(
            "--count must be positive",
            category="usage",
            context={"count": count},
        )

    ticks = 0
    try:
        while count is None or ticks < count:
            if ticks:
                sleep(interval)
            time_text, weekday = clock_key(clock())
            descriptor = plan.phase(time_text, weekday)
            sys.stdout.write(format_phase_line(time_text, weekday, descriptor) + "\n")
            sys.stdout.flush()
            ticks += 1
    except KeyboardInterrupt:
        logger.info("Watch interrupted", extra={"event": "cli.watch_interrupted", "ticks": ticks})
    return ""
