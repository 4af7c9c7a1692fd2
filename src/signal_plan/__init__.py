"""Top-level package for signal-plan.

The package turns the text of a traffic-signal timing-plan document into a
weekly schedule and a table of timing definitions, computes which phase is
active at a given clock time, and tags the plan's phase diagrams so they can
be matched to the computed phase.
"""

from ._version import __version__
from .core import (
    WEEKDAYS,
    PhaseDescriptor,
    RasterGraphic,
    ScheduleEntry,
    TaggedGraphic,
    TimingDefinition,
    TimingTable,
    compute_phase,
    compute_phase_at,
    correlate_graphics,
    group_by_type,
    parse_timing_rows,
    parse_timing_table,
    select_graphic,
    tokenize_pages,
)
from .ingestion import DocumentError, SourceDocument
from .processing import TimingPlan, extract_plan, plan_to_payload, table_from_payload

__all__ = [
    "WEEKDAYS",
    "DocumentError",
    "PhaseDescriptor",
    "RasterGraphic",
    "ScheduleEntry",
    "SourceDocument",
    "TaggedGraphic",
    "TimingDefinition",
    "TimingPlan",
    "TimingTable",
    "compute_phase",
    "compute_phase_at",
    "correlate_graphics",
    "extract_plan",
    "group_by_type",
    "parse_timing_rows",
    "parse_timing_table",
    "plan_to_payload",
    "select_graphic",
    "table_from_payload",
    "tokenize_pages",
    "__version__",
]
