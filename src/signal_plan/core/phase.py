"""Phase-state calculator.

Given a clock time and weekday, :func:`compute_phase` resolves the timing
type active for that day and locates the current phase inside its cycle with
modular arithmetic.  The function is pure: it keeps no state between calls
and every input maps to a well-formed :class:`PhaseDescriptor`.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Iterator, Optional, Sequence

from .models import (
    PhaseDescriptor,
    ScheduleEntry,
    TimingDefinition,
    TimingDefinitionTable,
    WeeklySchedule,
)

__all__ = [
    "clock_key",
    "compute_phase",
    "compute_phase_at",
    "iter_phase_timeline",
    "resolve_timing_type",
]

_QUERY_TIME = re.compile(r"^(\d{2}):(\d{2})(?::(\d{2}))?$", re.ASCII)


def _seconds_of_day(time: str) -> Optional[int]:
    match = _QUERY_TIME.match(time)
    if match is None:
        return None
    hours, minutes, seconds = match.groups()
    return int(hours) * 3600 + int(minutes) * 60 + int(seconds or 0)


def resolve_timing_type(schedule: Sequence[ScheduleEntry], time: str) -> Optional[str]:
    """Return the timing type in force at ``time`` for one day's schedule.

    Entries are taken in document order, which is assumed to be
    chronological.  Before the first switch of the day the first entry's type
    applies.
    """

    if not schedule:
        return None
    current = schedule[0].timing_type
    for entry in schedule:
        # fixed-width clock strings compare chronologically
        if time >= entry.time:
            current = entry.timing_type
        else:
            break
    return current


def _start_seconds(schedule: Sequence[ScheduleEntry], timing_type: str) -> Optional[int]:
    for entry in reversed(schedule):
        if entry.timing_type == timing_type:
            return _seconds_of_day(entry.time)
    return 0


def _locate_phase(
    definition: TimingDefinition, elapsed: int, timing_type: str
) -> PhaseDescriptor:
    running = 0
    for index, duration in enumerate(definition.phase_durations):
        running += duration
        if running > elapsed:
            return PhaseDescriptor(
                phase_type=definition.phase_type,
                phase_index=index,
                remaining_seconds=max(0, running - elapsed),
                type_code=timing_type,
            )
    return PhaseDescriptor(
        phase_type=definition.phase_type,
        phase_index=len(definition.phase_durations) - 1,
        remaining_seconds=0,
        type_code=timing_type,
    )


def compute_phase(
    time: str,
    weekday: int,
    definitions: TimingDefinitionTable,
    schedule: WeeklySchedule,
) -> PhaseDescriptor:
    """Return the active phase for ``time`` (``HH:MM:SS``) on ``weekday`` (1-7).

    The elapsed time within the cycle is measured from the last schedule
    entry (in document order) that starts the resolved timing type, shifted
    by the definition offset and reduced modulo the period.
    """

    total_seconds = _seconds_of_day(time)
    if total_seconds is None:
        return PhaseDescriptor.indeterminate()

    day_schedule = schedule.get(weekday) or ()
    timing_type = resolve_timing_type(day_schedule, time)
    if timing_type is None:
        return PhaseDescriptor.indeterminate()

    definition = definitions.get(timing_type)
    if definition is None:
        return PhaseDescriptor.indeterminate()

    start_seconds = _start_seconds(day_schedule, timing_type)
    if start_seconds is None:
        return PhaseDescriptor.indeterminate()
    elapsed = (total_seconds - start_seconds - definition.offset) % definition.effective_period
    return _locate_phase(definition, elapsed, timing_type)


def clock_key(moment: datetime) -> tuple[str, int]:
    """Return the ``(HH:MM:SS, weekday)`` query key for ``moment``; Sunday is 7."""

    return moment.strftime("%H:%M:%S"), moment.isoweekday()


def compute_phase_at(
    moment: datetime,
    definitions: TimingDefinitionTable,
    schedule: WeeklySchedule,
) -> PhaseDescriptor:
    time, weekday = clock_key(moment)
    return compute_phase(time, weekday, definitions, schedule)


def iter_phase_timeline(
    start: datetime,
    seconds: int,
    definitions: TimingDefinitionTable,
    schedule: WeeklySchedule,
    *,
    step: int = 1,
) -> Iterator[tuple[datetime, PhaseDescriptor]]:
    """Yield ``(moment, descriptor)`` every ``step`` seconds for ``seconds`` seconds."""

    if step <= 0:
        raise ValueError("step must be positive")
    for offset in range(0, max(0, seconds), step):
        moment = start + timedelta(seconds=offset)
        yield moment, compute_phase_at(moment, definitions, schedule)
