"""Core timing-plan model: parser, phase calculator and image correlator."""

from .correlator import (
    correlate_graphics,
    graphics_from_payload,
    group_by_type,
    scan_phase_tags,
    select_graphic,
)
from .models import (
    UNKNOWN_TYPE,
    WEEKDAYS,
    PhaseDescriptor,
    RasterGraphic,
    ScheduleEntry,
    TaggedGraphic,
    TimingDefinition,
    TimingDefinitionTable,
    TimingTable,
    WeeklySchedule,
)
from .phase import clock_key, compute_phase, compute_phase_at, iter_phase_timeline
from .timing_table import parse_timing_rows, parse_timing_table
from .tokenizer import flatten_tokens, tokenize_page, tokenize_pages

__all__ = [
    "UNKNOWN_TYPE",
    "WEEKDAYS",
    "PhaseDescriptor",
    "RasterGraphic",
    "ScheduleEntry",
    "TaggedGraphic",
    "TimingDefinition",
    "TimingDefinitionTable",
    "TimingTable",
    "WeeklySchedule",
    "clock_key",
    "compute_phase",
    "compute_phase_at",
    "correlate_graphics",
    "flatten_tokens",
    "graphics_from_payload",
    "group_by_type",
    "iter_phase_timeline",
    "parse_timing_rows",
    "parse_timing_table",
    "scan_phase_tags",
    "select_graphic",
    "tokenize_page",
    "tokenize_pages",
]
