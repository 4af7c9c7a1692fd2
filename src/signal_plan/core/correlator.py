"""Image-phase correlator.

Timing-plan pages illustrate each phase with a small diagram printed next to
a ``分相`` ("phase split") marker::

    36 分相：01 ... 分相：02 ... 分相：03

The token right before the first marker of a block names the timing type.
Markers are counted per type and the k-th marker of a page labels the k-th
graphic extracted from that page.  The alignment is positional only; nothing
inspects the image content.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Sequence

from .models import UNKNOWN_TYPE, PhaseDescriptor, RasterGraphic, TaggedGraphic
from .tokenizer import flatten_tokens

__all__ = [
    "PHASE_MARKER_PATTERN",
    "PhaseTag",
    "scan_phase_tags",
    "correlate_graphics",
    "group_by_type",
    "graphics_from_payload",
    "select_graphic",
]

logger = logging.getLogger(__name__)

PHASE_MARKER_PATTERN = re.compile(r"^分相\s*[:：]?\s*(\d{1,2})?$", re.ASCII)
_TYPE_CODE = re.compile(r"^[A-Z0-9]{2}$", re.ASCII | re.IGNORECASE)

PhaseTag = tuple[Optional[str], Optional[int]]


def scan_phase_tags(tokens: Sequence[str]) -> list[PhaseTag]:
    """Return one ``(type_code, occurrence_index)`` tag per phase marker."""

    tags: list[PhaseTag] = []
    current_type: Optional[str] = None
    counters: dict[str, int] = {}
    for position, token in enumerate(tokens):
        if not PHASE_MARKER_PATTERN.match(token):
            continue
        if position > 0 and _TYPE_CODE.match(tokens[position - 1]):
            current_type = tokens[position - 1].upper()
            counters[current_type] = 0
        if current_type is None:
            tags.append((None, None))
            continue
        counters[current_type] = counters.get(current_type, 0) + 1
        tags.append((current_type, counters[current_type]))
    return tags


def correlate_graphics(
    pages: Sequence[Optional[str]],
    graphics_by_page: Sequence[Sequence[RasterGraphic]],
) -> list[TaggedGraphic]:
    """Tag every page graphic with the phase marker at the same position.

    Pages are numbered from 1.  Graphics outnumbering the markers of their
    page, or living on a page without text, are returned untagged.
    """

    tagged: list[TaggedGraphic] = []
    for page_index, graphics in enumerate(graphics_by_page):
        page_number = page_index + 1
        text = pages[page_index] if page_index < len(pages) else None
        tags = scan_phase_tags(flatten_tokens(text))
        if len(graphics) > len(tags):
            logger.debug(
                "Page has more graphics than phase markers",
                extra={
                    "event": "correlator.untagged",
                    "page": page_number,
                    "graphics": len(graphics),
                    "markers": len(tags),
                },
            )
        for position, image in enumerate(graphics):
            type_code, occurrence = tags[position] if position < len(tags) else (None, None)
            tagged.append(
                TaggedGraphic(
                    page=page_number,
                    sequence_key=f"{page_number}-{position}",
                    image=image,
                    type_code=type_code,
                    occurrence_index=occurrence,
                )
            )
    return tagged


def group_by_type(
    tagged: Iterable[TaggedGraphic],
) -> Mapping[str, tuple[TaggedGraphic, ...]]:
    """Bucket graphics by type code, keeping extraction order inside a bucket."""

    groups: dict[str, list[TaggedGraphic]] = {}
    for graphic in tagged:
        key = graphic.type_code or UNKNOWN_TYPE
        groups.setdefault(key, []).append(graphic)
    return MappingProxyType({key: tuple(items) for key, items in groups.items()})


def _decode_data(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    text = str(value)
    header, separator, body = text.partition(",")
    if separator and header.startswith("data:") and header.endswith(";base64"):
        try:
            return base64.b64decode(body, validate=True)
        except binascii.Error:
            logger.debug("Undecodable data URL", extra={"event": "correlator.bad_data_url"})
    return text.encode("utf-8")


def _payload_item(
    raw: Any, *, type_code: Optional[str], position: int
) -> Optional[TaggedGraphic]:
    if isinstance(raw, TaggedGraphic):
        return raw
    if isinstance(raw, Mapping):
        width = int(raw.get("width") or 0)
        height = int(raw.get("height") or 0)
        data = raw.get("data") or raw.get("dataUrl") or b""
        code = raw.get("typeCode", type_code)
        index = raw.get("phaseIndex")
        page = int(raw.get("page") or 0)
        key = str(raw.get("key") or f"{page}-{position}")
    elif isinstance(raw, (str, bytes)):
        width = height = page = 0
        data, code, index, key = raw, type_code, None, f"0-{position}"
    else:
        return None
    data = _decode_data(data)
    if code is not None:
        code = str(code).strip().upper() or None
    if code == UNKNOWN_TYPE.upper():
        code = None
    return TaggedGraphic(
        page=page,
        sequence_key=key,
        image=RasterGraphic(width=width, height=height, data=data),
        type_code=code,
        occurrence_index=int(index) if index is not None else None,
    )


def graphics_from_payload(payload: Any) -> Mapping[str, tuple[TaggedGraphic, ...]]:
    """Normalise either serialised graphics shape into the canonical grouping.

    Accepts a sequence of graphic objects (``{"typeCode", "phaseIndex", ...}``)
    or a mapping of type code to a sequence of graphics or data URLs.  Inside
    a mapping, items without an explicit index are numbered by position.
    """

    items: list[TaggedGraphic] = []
    if isinstance(payload, Mapping):
        for type_code, group in payload.items():
            if not isinstance(group, Sequence) or isinstance(group, (str, bytes)):
                continue
            code = str(type_code).strip().upper()
            for position, raw in enumerate(group):
                item = _payload_item(raw, type_code=code, position=position)
                if item is None:
                    continue
                if item.type_code is not None and item.occurrence_index is None:
                    item = TaggedGraphic(
                        page=item.page,
                        sequence_key=item.sequence_key,
                        image=item.image,
                        type_code=item.type_code,
                        occurrence_index=position + 1,
                    )
                items.append(item)
    elif isinstance(payload, Sequence) and not isinstance(payload, (str, bytes)):
        for position, raw in enumerate(payload):
            item = _payload_item(raw, type_code=None, position=position)
            if item is not None:
                items.append(item)
    return group_by_type(items)


def select_graphic(
    grouped: Mapping[str, Sequence[TaggedGraphic]],
    descriptor: PhaseDescriptor,
) -> Optional[TaggedGraphic]:
    """Return the graphic illustrating ``descriptor``, if one was tagged.

    The descriptor's zero-based ``phase_index`` corresponds to the one-based
    ``occurrence_index`` of the correlator.
    """

    if descriptor.is_indeterminate or not descriptor.type_code:
        return None
    group = grouped.get(descriptor.type_code.upper())
    if not group:
        return None
    wanted = descriptor.phase_index + 1
    for graphic in group:
        if graphic.occurrence_index == wanted:
            return graphic
    if descriptor.phase_index < len(group):
        return group[descriptor.phase_index]
    return None
