from __future__ import annotations

import io
from pathlib import Path

import pytest
from PIL import Image

from signal_plan.core.correlator import correlate_graphics
from signal_plan.ingestion import DocumentError, decode_page_image, read_document
from signal_plan.ingestion import pdf as pdf_module
from tests.helpers import build_png_bytes


class _Stream:
    def __init__(self, data: bytes) -> None:
        self._data = data

    def get_data(self) -> bytes:
        return self._data


def test_raw_rgb_stream_is_used_as_pixels() -> None:
    image = {
        "srcsize": (2, 1),
        "stream": _Stream(bytes(range(6))),
        "colorspace": ["DeviceRGB"],
        "bits": 8,
    }

    graphic = decode_page_image(image)

    assert graphic is not None
    assert (graphic.width, graphic.height, graphic.channels) == (2, 1, 3)
    assert graphic.data == bytes(range(6))


def test_encoded_stream_is_decoded_with_pillow() -> None:
    image = {
        "srcsize": (3, 2),
        "stream": _Stream(build_png_bytes(3, 2, (0, 255, 0))),
        "colorspace": ["DeviceRGB"],
        "bits": 8,
    }

    graphic = decode_page_image(image)

    assert graphic is not None
    assert (graphic.width, graphic.height, graphic.channels) == (3, 2, 4)
    assert graphic.data[:4] == bytes([0, 255, 0, 255])


@pytest.mark.parametrize(
    ("image", "size"),
    [
        ({"srcsize": (4, 4), "stream": _Stream(b"0123456789"), "colorspace": ["DeviceRGB"], "bits": 8}, (4, 4)),
        ({"srcsize": (0, 0), "stream": _Stream(b"")}, (0, 0)),
        ({"srcsize": (2, 2)}, (2, 2)),
    ],
)
def test_undecodable_images_become_placeholders(image, size) -> None:
    graphic = decode_page_image(image)

    assert (graphic.width, graphic.height) == size
    assert graphic.data == b""
    assert graphic.channels == 0


class _Page:
    def __init__(self, text: str, images: list) -> None:
        self._text = text
        self.images = images

    def extract_text(self) -> str:
        return self._text


class _Pdf:
    def __init__(self, pages: list) -> None:
        self.pages = pages

    def __enter__(self) -> "_Pdf":
        return self

    def __exit__(self, *exc_info) -> None:
        return None


def test_undecodable_image_keeps_later_tags_in_place(monkeypatch: pytest.MonkeyPatch) -> None:
    def raw(fill: int) -> dict:
        return {"srcsize": (1, 1), "stream": _Stream(bytes([fill] * 3)), "colorspace": ["DeviceRGB"], "bits": 8}

    broken = {"srcsize": (1, 1), "stream": _Stream(b"garbage"), "colorspace": ["DeviceRGB"], "bits": 8}
    page = _Page("36\u3000分相：01 分相：02 分相：03", [raw(1), broken, raw(3)])
    monkeypatch.setattr(pdf_module.pdfplumber, "open", lambda _source: _Pdf([page]))

    document = read_document(b"%PDF", label="three-phases.pdf")
    tagged = correlate_graphics(document.pages, document.graphics)

    assert document.pages == ("36 分相：01 分相：02 分相：03",)
    assert document.graphics_count == 3
    assert [(item.type_code, item.occurrence_index) for item in tagged] == [
        ("36", 1),
        ("36", 2),
        ("36", 3),
    ]
    assert tagged[1].image.data == b""
    assert tagged[2].image.data == bytes([3, 3, 3])


def _pdf_with_image() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (16, 8), (10, 20, 30)).save(buffer, format="PDF")
    return buffer.getvalue()


def test_read_document_extracts_page_graphics() -> None:
    document = read_document(_pdf_with_image(), label="generated.pdf")

    assert document.source == "generated.pdf"
    assert document.page_count == 1
    assert document.graphics_count == 1
    graphic = document.graphics[0][0]
    assert (graphic.width, graphic.height) == (16, 8)


def test_read_document_from_path(tmp_path: Path) -> None:
    path = tmp_path / "plan.pdf"
    path.write_bytes(_pdf_with_image())

    document = read_document(path)

    assert document.source == str(path)
    assert len(document.pages) == 1


def test_read_document_wraps_parse_failures() -> None:
    with pytest.raises(DocumentError) as excinfo:
        read_document(b"not a pdf at all", label="broken.pdf")

    assert excinfo.value.source == "broken.pdf"


def test_read_document_propagates_missing_files(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_document(tmp_path / "missing.pdf")
