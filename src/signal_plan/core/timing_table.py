"""Timing-table parser for tokenised timing-plan documents.

The documents carry no explicit schema.  The only reliable anchor is a pair
of consecutive rows labelled ``時間`` ("time") and ``時制`` ("timing type").
The upper row starts with a run of ``HH:MM`` tokens, one per weekday, followed
by the definition of a single timing type::

    時間 06:00 06:00 ... 06:00 36 120 0 1 PhaseA 30 40 50
    時制 01    01    ... 02

The first token after the clock run is the *boundary*: everything left of it
is the weekly schedule, everything from it onwards is the timing definition.
Rows that do not fit are skipped; parsing never fails on document content.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Sequence

from .models import (
    WEEKDAYS,
    ScheduleEntry,
    TimingDefinition,
    TimingTable,
    freeze_definitions,
    freeze_schedule,
)
from .tokenizer import TokenRow, tokenize_pages

__all__ = [
    "TIME_LABEL",
    "TIMING_TYPE_LABEL",
    "SCHEDULE_CODE_RULES",
    "parse_int",
    "parse_timing_rows",
    "parse_timing_table",
]

logger = logging.getLogger(__name__)

TIME_LABEL = "時間"
TIMING_TYPE_LABEL = "時制"

CLOCK_PATTERN = re.compile(r"^\d{2}:\d{2}$", re.ASCII)
TYPE_CODE_PATTERN = re.compile(r"^[A-Z0-9]{2}$", re.ASCII)
SCHEDULE_CODE_RULES: dict[str, re.Pattern[str]] = {
    "numeric": re.compile(r"^\d{2}$", re.ASCII),
    "alphanumeric": re.compile(r"^[A-Za-z0-9]{2}$", re.ASCII),
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)", re.ASCII)


def parse_int(token: Optional[str]) -> Optional[int]:
    """Parse the leading decimal integer of ``token``.

    Trailing characters are ignored (``"30s"`` gives ``30``); ``None`` is
    returned when no digits lead the token.
    """

    if not token:
        return None
    match = _LEADING_INT.match(token)
    if match is None:
        return None
    return int(match.group(1))


def _token(row: Sequence[str], index: int) -> str:
    return row[index].strip() if index < len(row) else ""


def _is_candidate_block(upper: Sequence[str], lower: Sequence[str]) -> bool:
    return _token(upper, 0) == TIME_LABEL and _token(lower, 0) == TIMING_TYPE_LABEL


def _find_boundary(upper: Sequence[str]) -> int:
    boundary = 1
    while boundary < len(upper) and CLOCK_PATTERN.match(_token(upper, boundary)):
        boundary += 1
    return boundary


def _parse_definition(upper: Sequence[str], boundary: int) -> Optional[tuple[str, TimingDefinition]]:
    type_code = _token(upper, boundary).upper()
    if not TYPE_CODE_PATTERN.match(type_code):
        return None
    durations = [
        value
        for value in (parse_int(_token(upper, index)) for index in range(boundary + 5, len(upper)))
        if value is not None
    ]
    definition = TimingDefinition(
        period=parse_int(_token(upper, boundary + 1)) or 0,
        offset=parse_int(_token(upper, boundary + 2)) or 0,
        direction=parse_int(_token(upper, boundary + 3)) or 0,
        phase_type=_token(upper, boundary + 4),
        phase_durations=tuple(durations),
    )
    return type_code, definition


def parse_timing_rows(
    rows: Sequence[TokenRow],
    *,
    schedule_codes: str = "numeric",
) -> TimingTable:
    """Extract the timing definitions and weekly schedule from token rows.

    ``schedule_codes`` selects which timing-type tokens are accepted in the
    schedule columns: ``"numeric"`` (two digits, the historical rule) or
    ``"alphanumeric"`` (the same alphabet as definition type codes).
    """

    try:
        schedule_rule = SCHEDULE_CODE_RULES[schedule_codes]
    except KeyError:
        raise ValueError(
            f"Unknown schedule code rule {schedule_codes!r}; "
            f"expected one of {sorted(SCHEDULE_CODE_RULES)}"
        ) from None

    definitions: dict[str, TimingDefinition] = {}
    schedule: dict[int, list[ScheduleEntry]] = {day: [] for day in WEEKDAYS}
    blocks = 0

    index = 0
    while index < len(rows) - 1:
        upper, lower = rows[index], rows[index + 1]
        if not _is_candidate_block(upper, lower):
            index += 1
            continue
        blocks += 1

        boundary = _find_boundary(upper)
        for day in range(1, boundary):
            time = _token(upper, day)
            timing_type = _token(lower, day)
            if day not in schedule:
                logger.debug(
                    "Ignoring schedule column beyond Sunday",
                    extra={"event": "timing_table.extra_column", "row": index, "column": day},
                )
                continue
            if CLOCK_PATTERN.match(time) and schedule_rule.match(timing_type):
                schedule[day].append(ScheduleEntry(time=time, timing_type=timing_type.upper()))
            else:
                logger.debug(
                    "Skipping schedule cell",
                    extra={
                        "event": "timing_table.skipped_cell",
                        "row": index,
                        "column": day,
                        "time": time,
                        "timing_type": timing_type,
                    },
                )

        parsed = _parse_definition(upper, boundary)
        if parsed is None:
            logger.debug(
                "No timing definition in block",
                extra={
                    "event": "timing_table.skipped_definition",
                    "row": index,
                    "token": _token(upper, boundary),
                },
            )
        else:
            type_code, definition = parsed
            definitions[type_code] = definition

        index += 2

    table = TimingTable(
        definitions=freeze_definitions(definitions),
        schedule=freeze_schedule(schedule),
    )
    logger.info(
        "Parsed timing table",
        extra={
            "event": "timing_table.parsed",
            "rows": len(rows),
            "blocks": blocks,
            "definitions": len(table.definitions),
            "schedule_entries": sum(len(entries) for entries in table.schedule.values()),
            "unresolved": list(table.unresolved_types()),
        },
    )
    return table


def parse_timing_table(pages: Iterable[Optional[str]], **options: str) -> TimingTable:
    """Tokenise the page texts of one document and parse its timing table."""

    return parse_timing_rows(tokenize_pages(pages), **options)
