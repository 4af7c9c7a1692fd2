from __future__ import annotations

import base64
import logging
from datetime import datetime

import pytest

from signal_plan.core.models import WEEKDAYS, ScheduleEntry
from signal_plan.processing import (
    TimingPlan,
    descriptor_to_payload,
    extract_plan,
    plan_to_payload,
    table_from_payload,
    table_to_payload,
)


def test_extract_plan_combines_table_and_graphics(monday_document) -> None:
    plan = extract_plan(monday_document)

    assert set(plan.table.definitions) == {"36", "37"}
    assert plan.table.schedule[1] == (
        ScheduleEntry("08:00", "36"),
        ScheduleEntry("18:00", "37"),
    )
    assert [(item.type_code, item.occurrence_index) for item in plan.graphics] == [
        ("36", 1),
        ("36", 2),
        ("36", 3),
    ]
    assert plan.source == "monday.txt"


def test_extract_plan_logs_summary(monday_document, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="signal_plan"):
        extract_plan(monday_document)

    events = [getattr(record, "event", None) for record in caplog.records]
    assert "timing_table.parsed" in events
    assert "processing.extracted" in events


def test_plan_phase_and_graphic_lookup(monday_document) -> None:
    plan = extract_plan(monday_document)

    descriptor = plan.phase("08:00:45", 1)
    graphic = plan.graphic_for(descriptor)

    assert (descriptor.type_code, descriptor.phase_index) == ("36", 1)
    assert graphic is not None
    assert graphic.sequence_key == "1-1"


def test_plan_phase_after_evening_switch(monday_document) -> None:
    plan = extract_plan(monday_document)

    # type 37: period 90, offset 10, durations 20/25/45
    descriptor = plan.phase_at(datetime(2024, 6, 3, 18, 0, 0))

    assert descriptor.type_code == "37"
    assert descriptor.phase_type == "PhaseB"
    assert (descriptor.phase_index, descriptor.remaining_seconds) == (2, 10)
    assert plan.graphic_for(descriptor) is None


def test_plan_to_payload_shape(monday_document) -> None:
    payload = plan_to_payload(extract_plan(monday_document))

    assert payload["timingMap"]["36"] == {
        "period": 120,
        "offset": 0,
        "direction": 1,
        "phaseType": "PhaseA",
        "phaseDurations": [30, 40, 50],
    }
    assert sorted(payload["scheduleMap"]) == [str(day) for day in WEEKDAYS]
    assert payload["scheduleMap"]["1"][0] == {"time": "08:00", "timingType": "36"}
    assert list(payload["images"]) == ["36"]
    for url in payload["images"]["36"]:
        assert url.startswith("data:image/png;base64,")
        assert base64.b64decode(url.partition(",")[2]).startswith(b"\x89PNG")


def test_plan_to_payload_without_images(monday_document) -> None:
    payload = plan_to_payload(extract_plan(monday_document), include_images=False)

    assert "images" not in payload


def test_table_payload_round_trip(monday_table) -> None:
    rebuilt = table_from_payload(table_to_payload(monday_table))

    assert dict(rebuilt.definitions) == dict(monday_table.definitions)
    assert dict(rebuilt.schedule) == dict(monday_table.schedule)


def test_table_from_payload_is_lenient() -> None:
    payload = {
        "timingMap": {
            "a3": {"period": "90", "offset": None, "phaseDurations": ["20", 30, "x"]},
            "bad": "not a mapping",
        },
        "scheduleMap": {"1": [{"time": "07:00", "timingType": "a3"}, "junk"], "9": []},
    }

    table = table_from_payload(payload)

    assert table.definitions["A3"].period == 90
    assert table.definitions["A3"].offset == 0
    assert table.definitions["A3"].phase_durations == (20, 30)
    assert "BAD" not in table.definitions
    assert table.schedule[1] == (ScheduleEntry("07:00", "A3"),)
    assert set(table.schedule) == set(WEEKDAYS)


def test_descriptor_payload_uses_camel_case(monday_table) -> None:
    plan = TimingPlan(table=monday_table)

    payload = descriptor_to_payload(plan.phase("08:00:29", 1))

    assert payload == {
        "phaseType": "PhaseA",
        "phaseIndex": 0,
        "remainingSeconds": 1,
        "typeCode": "36",
    }


def test_table_from_payload_skips_unparsable_times() -> None:
    payload = {
        "timingMap": {"36": {"period": 120, "offset": 0, "phaseDurations": [30, 40, 50]}},
        "scheduleMap": {"1": [{"time": "8am", "timingType": "36"}, {"time": "09:00", "timingType": "36"}]},
    }

    table = table_from_payload(payload)

    assert table.schedule[1] == (ScheduleEntry("09:00", "36"),)
    descriptor = TimingPlan(table=table).phase("09:00:31", 1)
    assert (descriptor.phase_index, descriptor.remaining_seconds) == (1, 39)


def test_payload_with_only_unparsable_times_has_no_phase() -> None:
    payload = {
        "timingMap": {"36": {"period": 120, "phaseDurations": [30, 40, 50]}},
        "scheduleMap": {"1": [{"time": "8am", "timingType": "36"}]},
    }

    descriptor = TimingPlan(table=table_from_payload(payload)).phase("09:00:00", 1)

    assert descriptor.is_indeterminate
