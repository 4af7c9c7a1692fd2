"""Exporter registry for signal-plan outputs."""

from __future__ import annotations

import csv
import json
from dataclasses import asdict, is_dataclass
from io import StringIO
from typing import Any, Dict, Mapping, Protocol

WEEKDAY_NAMES = {
    "1": "Mon",
    "2": "Tue",
    "3": "Wed",
    "4": "Thu",
    "5": "Fri",
    "6": "Sat",
    "7": "Sun",
}

CSV_COLUMNS = ("weekday", "time", "timing_type", "period", "offset", "phase_type")


class Exporter(Protocol):
    """Exporter callable protocol."""

    def __call__(self, results: Dict[str, Any]) -> str:  # pragma: no cover - interface only
        ...


def _normalise(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, (list, tuple)):
        return [_normalise(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): _normalise(item) for key, item in value.items()}
    return value


def _timing_map(results: Mapping[str, Any]) -> Mapping[str, Mapping[str, Any]]:
    timing_map = results.get("timingMap")
    return timing_map if isinstance(timing_map, Mapping) else {}


def _schedule_rows(results: Mapping[str, Any]):
    schedule_map = results.get("scheduleMap")
    if not isinstance(schedule_map, Mapping):
        return
    for day in sorted(schedule_map, key=lambda value: int(value)):
        for entry in schedule_map[day] or ():
            yield str(day), entry


def json_exporter(results: Dict[str, Any]) -> str:
    payload = _normalise(results)
    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False)


def csv_exporter(results: Dict[str, Any]) -> str:
    """One row per schedule entry joined with its timing definition."""

    timing_map = _timing_map(results)
    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for day, entry in _schedule_rows(results):
        timing_type = entry.get("timingType", "")
        definition = timing_map.get(timing_type, {})
        writer.writerow(
            (
                day,
                entry.get("time", ""),
                timing_type,
                definition.get("period", ""),
                definition.get("offset", ""),
                definition.get("phaseType", ""),
            )
        )
    return buffer.getvalue()


def markdown_exporter(results: Dict[str, Any]) -> str:
    """Render the timing definitions and the weekly schedule as Markdown tables."""

    lines = [
        "| Type | Period | Offset | Direction | Phase type | Phase durations |",
        "| --- | --- | --- | --- | --- | --- |",
    ]
    timing_map = _timing_map(results)
    for code in sorted(timing_map):
        definition = timing_map[code]
        durations = ", ".join(str(value) for value in definition.get("phaseDurations", ()))
        lines.append(
            f"| {code} | {definition.get('period', 0)} | {definition.get('offset', 0)} "
            f"| {definition.get('direction', 0)} | {definition.get('phaseType', '') or '-'} "
            f"| {durations or '-'} |"
        )

    lines.extend(["", "| Day | Time | Type |", "| --- | --- | --- |"])
    for day, entry in _schedule_rows(results):
        name = WEEKDAY_NAMES.get(day, day)
        lines.append(f"| {name} | {entry.get('time', '')} | {entry.get('timingType', '')} |")

    unresolved = sorted(
        {entry.get("timingType", "") for _, entry in _schedule_rows(results)} - set(timing_map)
    )
    if unresolved:
        lines.append("")
        lines.append(f"**Unresolved timing types:** {', '.join(unresolved)}")
    return "\n".join(lines)


exporters_registry: Dict[str, Exporter] = {
    "json": json_exporter,
    "csv": csv_exporter,
    "markdown": markdown_exporter,
}

__all__ = [
    "CSV_COLUMNS",
    "Exporter",
    "WEEKDAY_NAMES",
    "csv_exporter",
    "exporters_registry",
    "json_exporter",
    "markdown_exporter",
]
