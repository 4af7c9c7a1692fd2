"""Example that parses a timing plan and prints one cycle of phases."""

from __future__ import annotations

from datetime import datetime

from signal_plan.core import iter_phase_timeline, parse_timing_table
from signal_plan.exporters import markdown_exporter
from signal_plan.processing import table_to_payload

PAGE = """臺北市 號誌時制計畫表
時間 06:00 06:00 06:00 06:00 06:00 07:00 07:00 36 120 0 1 PhaseA 30 40 50
時制 36 36 36 36 36 36 36
時間 22:00 22:00 22:00 22:00 22:00 23:00 23:00 37 90 10 2 PhaseB 20 25 45
時制 37 37 37 37 37 37 37
"""


def main() -> None:
    table = parse_timing_table([PAGE])
    print(markdown_exporter(table_to_payload(table)))
    print()
    start = datetime(2024, 6, 3, 8, 0, 0)
    for moment, descriptor in iter_phase_timeline(
        start, 120, table.definitions, table.schedule, step=10
    ):
        print(
            f"{moment:%H:%M:%S} {descriptor.type_code} "
            f"phase {descriptor.phase_index} remaining {descriptor.remaining_seconds}s"
        )


if __name__ == "__main__":
    main()
