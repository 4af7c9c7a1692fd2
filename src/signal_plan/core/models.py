"""Immutable data model shared by the parser, calculator and correlator."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence

__all__ = [
    "WEEKDAYS",
    "UNKNOWN_TYPE",
    "TimingDefinition",
    "ScheduleEntry",
    "TimingDefinitionTable",
    "WeeklySchedule",
    "TimingTable",
    "RasterGraphic",
    "TaggedGraphic",
    "PhaseDescriptor",
    "freeze_definitions",
    "freeze_schedule",
]

WEEKDAYS: tuple[int, ...] = (1, 2, 3, 4, 5, 6, 7)
UNKNOWN_TYPE = "unknown"


def _clock_to_seconds(value: str) -> int:
    hours, _, minutes = value.partition(":")
    return int(hours) * 3600 + int(minutes[:2]) * 60


@dataclass(frozen=True, slots=True)
class TimingDefinition:
    """One signal program: cycle length, offset and ordered phase durations."""

    period: int
    offset: int
    direction: int
    phase_type: str
    phase_durations: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "phase_durations", tuple(self.phase_durations))

    @property
    def effective_period(self) -> int:
        """Period usable as a modulus: its magnitude, with zero treated as one second."""

        return abs(self.period) or 1

    @property
    def cycle_length(self) -> int:
        return sum(self.phase_durations)


@dataclass(frozen=True, slots=True)
class ScheduleEntry:
    """From ``time`` (``HH:MM``) onwards the day runs ``timing_type``."""

    time: str
    timing_type: str

    @property
    def start_seconds(self) -> int:
        return _clock_to_seconds(self.time)


TimingDefinitionTable = Mapping[str, TimingDefinition]
WeeklySchedule = Mapping[int, Sequence[ScheduleEntry]]


def freeze_definitions(
    definitions: Mapping[str, TimingDefinition],
) -> TimingDefinitionTable:
    """Return a read-only view over a copy of ``definitions``."""

    return MappingProxyType(dict(definitions))


def freeze_schedule(
    schedule: Mapping[int, Iterable[ScheduleEntry]],
) -> WeeklySchedule:
    """Return a read-only schedule holding exactly the weekdays 1..7."""

    frozen = {day: tuple(schedule.get(day, ())) for day in WEEKDAYS}
    return MappingProxyType(frozen)


@dataclass(frozen=True, slots=True)
class TimingTable:
    """Definition table and weekly schedule parsed from one document."""

    definitions: TimingDefinitionTable = field(
        default_factory=lambda: freeze_definitions({})
    )
    schedule: WeeklySchedule = field(default_factory=lambda: freeze_schedule({}))

    def __post_init__(self) -> None:
        if not isinstance(self.definitions, MappingProxyType):
            object.__setattr__(self, "definitions", freeze_definitions(self.definitions))
        if not isinstance(self.schedule, MappingProxyType) or set(self.schedule) != set(WEEKDAYS):
            object.__setattr__(self, "schedule", freeze_schedule(self.schedule))

    @property
    def is_empty(self) -> bool:
        return not self.definitions and not any(self.schedule.values())

    def unresolved_types(self) -> tuple[str, ...]:
        """Schedule type codes that have no timing definition, in first-seen order."""

        missing: dict[str, None] = {}
        for day in WEEKDAYS:
            for entry in self.schedule[day]:
                if entry.timing_type not in self.definitions:
                    missing.setdefault(entry.timing_type, None)
        return tuple(missing)


@dataclass(frozen=True, slots=True)
class RasterGraphic:
    """Decoded page image as produced by the rasteriser."""

    width: int
    height: int
    data: bytes = field(repr=False)

    @property
    def channels(self) -> int:
        """Bytes per pixel inferred from the buffer size, ``0`` if inconsistent."""

        pixels = self.width * self.height
        if pixels <= 0 or len(self.data) % pixels:
            return 0
        return len(self.data) // pixels


@dataclass(frozen=True, slots=True)
class TaggedGraphic:
    page: int
    sequence_key: str
    image: RasterGraphic
    type_code: Optional[str] = None
    occurrence_index: Optional[int] = None

    @property
    def is_tagged(self) -> bool:
        return self.type_code is not None and self.occurrence_index is not None


@dataclass(frozen=True, slots=True)
class PhaseDescriptor:
    """Active phase at a queried instant.

    ``phase_index`` is zero-based; ``-1`` together with an empty
    ``phase_type`` marks an indeterminate result (no schedule for the day or
    an unresolved timing type).
    """

    phase_type: str
    phase_index: int
    remaining_seconds: int
    type_code: str = ""

    @classmethod
    def indeterminate(cls) -> "PhaseDescriptor":
        return cls(phase_type="", phase_index=-1, remaining_seconds=0)

    @property
    def is_indeterminate(self) -> bool:
        return self.phase_index < 0
