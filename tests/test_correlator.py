from __future__ import annotations

import base64

from signal_plan.core.correlator import (
    correlate_graphics,
    graphics_from_payload,
    group_by_type,
    scan_phase_tags,
    select_graphic,
)
from signal_plan.core.models import PhaseDescriptor, TaggedGraphic
from tests.helpers import build_graphic


def test_markers_after_type_code_are_counted_per_type() -> None:
    page = "A3 分相：01 說明 分相：02"
    graphics = [build_graphic(fill=1), build_graphic(fill=2)]

    tagged = correlate_graphics([page], [graphics])

    assert [(item.type_code, item.occurrence_index) for item in tagged] == [
        ("A3", 1),
        ("A3", 2),
    ]
    assert [item.image for item in tagged] == graphics
    assert [item.sequence_key for item in tagged] == ["1-0", "1-1"]


def test_scan_phase_tags_switches_type_and_restarts_count() -> None:
    tokens = ["36", "分相：01", "分相：02", "37", "分相：1", "分相"]

    assert scan_phase_tags(tokens) == [("36", 1), ("36", 2), ("37", 1), ("37", 2)]


def test_marker_without_preceding_type_is_untagged() -> None:
    assert scan_phase_tags(["分相：01", "分相：02"]) == [(None, None), (None, None)]


def test_type_code_is_normalised_to_upper_case() -> None:
    assert scan_phase_tags(["a3", "分相:01"]) == [("A3", 1)]


def test_extra_graphics_are_left_untagged() -> None:
    page = "36 分相：01"
    graphics = [build_graphic(), build_graphic(), build_graphic()]

    tagged = correlate_graphics([page], [graphics])

    assert tagged[0].is_tagged
    assert [item.type_code for item in tagged[1:]] == [None, None]
    assert not tagged[2].is_tagged


def test_page_without_markers_or_text_is_untagged() -> None:
    tagged = correlate_graphics(["時間 08:00", None], [[build_graphic()], [build_graphic()]])

    assert [item.page for item in tagged] == [1, 2]
    assert all(item.type_code is None for item in tagged)
    assert [item.sequence_key for item in tagged] == ["1-0", "2-0"]


def test_graphics_on_pages_beyond_the_text_are_untagged() -> None:
    tagged = correlate_graphics([], [[build_graphic()]])

    assert len(tagged) == 1
    assert tagged[0].type_code is None


def test_counters_restart_per_page_section() -> None:
    pages = ["36 分相：01 分相：02", "36 分相：01"]
    graphics = [[build_graphic(), build_graphic()], [build_graphic()]]

    tagged = correlate_graphics(pages, graphics)

    assert [(item.page, item.occurrence_index) for item in tagged] == [(1, 1), (1, 2), (2, 1)]


def test_group_by_type_collects_untagged_under_unknown() -> None:
    tagged = correlate_graphics(["36 分相：01"], [[build_graphic(), build_graphic()]])

    grouped = group_by_type(tagged)

    assert list(grouped) == ["36", "unknown"]
    assert len(grouped["36"]) == 1
    assert len(grouped["unknown"]) == 1


def _data_url(raw: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(raw).decode("ascii")


def test_graphics_from_payload_accepts_object_list() -> None:
    payload = [
        {"typeCode": "36", "phaseIndex": 2, "page": 1, "key": "1-1", "dataUrl": _data_url(b"b")},
        {"typeCode": None, "phaseIndex": None, "page": 1, "key": "1-2", "dataUrl": _data_url(b"c")},
    ]

    grouped = graphics_from_payload(payload)

    assert grouped["36"][0].occurrence_index == 2
    assert grouped["36"][0].image.data == b"b"
    assert grouped["unknown"][0].sequence_key == "1-2"


def test_graphics_from_payload_accepts_type_mapping() -> None:
    payload = {"36": [_data_url(b"x"), _data_url(b"y")], "unknown": [_data_url(b"z")]}

    grouped = graphics_from_payload(payload)

    assert [item.occurrence_index for item in grouped["36"]] == [1, 2]
    assert [item.image.data for item in grouped["36"]] == [b"x", b"y"]
    assert grouped["unknown"][0].type_code is None
    assert grouped["unknown"][0].occurrence_index is None


def test_select_graphic_maps_zero_based_phase_to_occurrence() -> None:
    grouped = group_by_type(
        correlate_graphics(["36 分相：01 分相：02"], [[build_graphic(fill=1), build_graphic(fill=2)]])
    )

    second = select_graphic(grouped, PhaseDescriptor("PhaseA", 1, 10, type_code="36"))

    assert isinstance(second, TaggedGraphic)
    assert second.occurrence_index == 2
    assert select_graphic(grouped, PhaseDescriptor("PhaseA", 5, 10, type_code="36")) is None
    assert select_graphic(grouped, PhaseDescriptor("PhaseA", 0, 10, type_code="99")) is None
    assert select_graphic(grouped, PhaseDescriptor.indeterminate()) is None
