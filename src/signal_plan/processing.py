"""End-to-end extraction of a timing plan and its JSON payloads."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from .core.correlator import correlate_graphics, group_by_type, select_graphic
from .core.models import (
    WEEKDAYS,
    PhaseDescriptor,
    ScheduleEntry,
    TaggedGraphic,
    TimingDefinition,
    TimingTable,
)
from .core.phase import compute_phase, compute_phase_at
from .core.timing_table import CLOCK_PATTERN, parse_int, parse_timing_table
from .graphics import to_data_url
from .ingestion.document import SourceDocument

__all__ = [
    "TimingPlan",
    "extract_plan",
    "plan_to_payload",
    "table_to_payload",
    "table_from_payload",
    "descriptor_to_payload",
    "graphic_to_payload",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TimingPlan:
    """Parsed timing table plus the tagged graphics of one document."""

    table: TimingTable
    graphics: tuple[TaggedGraphic, ...] = ()
    source: str = ""
    _grouped: Mapping[str, tuple[TaggedGraphic, ...]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "graphics", tuple(self.graphics))
        object.__setattr__(self, "_grouped", group_by_type(self.graphics))

    @property
    def grouped_graphics(self) -> Mapping[str, tuple[TaggedGraphic, ...]]:
        return self._grouped

    def phase(self, time: str, weekday: int) -> PhaseDescriptor:
        return compute_phase(time, weekday, self.table.definitions, self.table.schedule)

    def phase_at(self, moment: datetime) -> PhaseDescriptor:
        return compute_phase_at(moment, self.table.definitions, self.table.schedule)

    def graphic_for(self, descriptor: PhaseDescriptor) -> Optional[TaggedGraphic]:
        return select_graphic(self._grouped, descriptor)


def extract_plan(document: SourceDocument, **parser_options: str) -> TimingPlan:
    """Run the timing-table parser and the image correlator over ``document``."""

    table = parse_timing_table(document.pages, **parser_options)
    tagged = correlate_graphics(document.pages, document.graphics)
    plan = TimingPlan(table=table, graphics=tuple(tagged), source=document.source)
    logger.info(
        "Extracted timing plan",
        extra={
            "event": "processing.extracted",
            "source": document.source,
            "pages": document.page_count,
            "definitions": len(table.definitions),
            "graphics": len(tagged),
            "tagged": sum(1 for item in tagged if item.is_tagged),
        },
    )
    return plan


def _definition_to_payload(definition: TimingDefinition) -> dict[str, Any]:
    return {
        "period": definition.period,
        "offset": definition.offset,
        "direction": definition.direction,
        "phaseType": definition.phase_type,
        "phaseDurations": list(definition.phase_durations),
    }


def table_to_payload(table: TimingTable) -> dict[str, Any]:
    return {
        "timingMap": {
            code: _definition_to_payload(definition)
            for code, definition in table.definitions.items()
        },
        "scheduleMap": {
            str(day): [
                {"time": entry.time, "timingType": entry.timing_type}
                for entry in table.schedule[day]
            ]
            for day in WEEKDAYS
        },
    }


def graphic_to_payload(graphic: TaggedGraphic) -> dict[str, Any]:
    return {
        "page": graphic.page,
        "key": graphic.sequence_key,
        "width": graphic.image.width,
        "height": graphic.image.height,
        "typeCode": graphic.type_code,
        "phaseIndex": graphic.occurrence_index,
    }


def plan_to_payload(plan: TimingPlan, *, include_images: bool = True) -> dict[str, Any]:
    """Serialise ``plan`` into the ``timingMap``/``scheduleMap``/``images`` shape.

    Images are grouped by type code as PNG data URLs; graphics without a
    type land under ``"unknown"``.
    """

    payload = table_to_payload(plan.table)
    if include_images:
        payload["images"] = {
            code: [to_data_url(graphic.image) for graphic in group]
            for code, group in plan.grouped_graphics.items()
        }
    return payload


def descriptor_to_payload(descriptor: PhaseDescriptor) -> dict[str, Any]:
    return {
        "phaseType": descriptor.phase_type,
        "phaseIndex": descriptor.phase_index,
        "remainingSeconds": descriptor.remaining_seconds,
        "typeCode": descriptor.type_code,
    }


def _durations_from_payload(raw: Any) -> tuple[int, ...]:
    if not isinstance(raw, (list, tuple)):
        return ()
    durations = []
    for item in raw:
        value = item if isinstance(item, int) and not isinstance(item, bool) else parse_int(str(item))
        if value is not None:
            durations.append(value)
    return tuple(durations)


def _int_field(raw: Mapping[str, Any], key: str) -> int:
    value = raw.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if value is None:
        return 0
    return parse_int(str(value)) or 0


def table_from_payload(payload: Mapping[str, Any]) -> TimingTable:
    """Rebuild an immutable :class:`TimingTable` from a ``timingMap`` payload.

    Entries with an unexpected shape are skipped, as the parser does for
    document rows.
    """

    definitions: dict[str, TimingDefinition] = {}
    timing_map = payload.get("timingMap")
    if isinstance(timing_map, Mapping):
        for code, raw in timing_map.items():
            if not isinstance(raw, Mapping):
                continue
            definitions[str(code).strip().upper()] = TimingDefinition(
                period=_int_field(raw, "period"),
                offset=_int_field(raw, "offset"),
                direction=_int_field(raw, "direction"),
                phase_type=str(raw.get("phaseType") or ""),
                phase_durations=_durations_from_payload(raw.get("phaseDurations")),
            )

    schedule: dict[int, list[ScheduleEntry]] = {day: [] for day in WEEKDAYS}
    schedule_map = payload.get("scheduleMap")
    if isinstance(schedule_map, Mapping):
        for raw_day, entries in schedule_map.items():
            day = parse_int(str(raw_day))
            if day not in schedule or not isinstance(entries, (list, tuple)):
                continue
            for entry in entries:
                if not isinstance(entry, Mapping):
                    continue
                time = entry.get("time")
                timing_type = entry.get("timingType")
                if isinstance(time, str) and CLOCK_PATTERN.match(time) and timing_type is not None:
                    schedule[day].append(
                        ScheduleEntry(time=time, timing_type=str(timing_type).strip().upper())
                    )

    return TimingTable(definitions=definitions, schedule=schedule)
