"""PDF adapter built on :mod:`pdfplumber`.

The adapter extracts, page by page, the plain text and the embedded raster
graphics of a timing-plan document.  Everything it returns is plain data; the
core never sees a PDF object.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, BinaryIO, Mapping, Optional, Union

import pdfplumber
from PIL import Image, UnidentifiedImageError
from pdfminer.psparser import PSException

from ..core.models import RasterGraphic
from .document import DocumentError, SourceDocument

__all__ = ["decode_page_image", "read_document"]

logger = logging.getLogger(__name__)

PdfSource = Union[bytes, bytearray, str, Path, BinaryIO]

_IDEOGRAPHIC_SPACE = "　"
_CHANNELS_BY_COLORSPACE = {"DeviceRGB": 3, "DeviceGray": 1, "DeviceCMYK": 4}


def _colorspace_name(image: Mapping[str, Any]) -> str:
    colorspace = image.get("colorspace")
    if isinstance(colorspace, (list, tuple)) and colorspace:
        colorspace = colorspace[0]
    name = getattr(colorspace, "name", colorspace)
    return str(name or "")


def decode_page_image(image: Mapping[str, Any]) -> RasterGraphic:
    """Decode one ``pdfplumber`` image object into RGBA pixels.

    Flate-compressed 8-bit streams are taken as raw pixels; other encodings
    (JPEG and friends) go through Pillow.  Streams neither path understands
    yield an empty placeholder of the declared size, so every image keeps its
    position on the page.
    """

    width, height = (max(0, int(value)) for value in image.get("srcsize", (0, 0)))
    placeholder = RasterGraphic(width=width, height=height, data=b"")
    stream = image.get("stream")
    if stream is None or width == 0 or height == 0:
        return placeholder
    try:
        data = stream.get_data()
    except (PSException, OSError, ValueError) as exc:
        logger.warning(
            "Unable to read image stream",
            extra={"event": "pdf.image_stream_error", "error": str(exc)},
        )
        return placeholder

    channels = _CHANNELS_BY_COLORSPACE.get(_colorspace_name(image), 0)
    bits = int(image.get("bits") or 8)
    if channels in (1, 3) and bits == 8 and len(data) == width * height * channels:
        return RasterGraphic(width=width, height=height, data=bytes(data))

    try:
        with Image.open(io.BytesIO(data)) as decoded:
            rgba = decoded.convert("RGBA")
    except (UnidentifiedImageError, OSError, ValueError):
        logger.debug(
            "Keeping undecodable image as a blank placeholder",
            extra={
                "event": "pdf.image_undecodable",
                "width": width,
                "height": height,
                "colorspace": _colorspace_name(image),
                "bytes": len(data),
            },
        )
        return placeholder
    return RasterGraphic(width=rgba.width, height=rgba.height, data=rgba.tobytes())


def _open(source: PdfSource) -> Any:
    if isinstance(source, (bytes, bytearray)):
        return pdfplumber.open(io.BytesIO(bytes(source)))
    if isinstance(source, (str, Path)):
        return pdfplumber.open(Path(source).expanduser())
    return pdfplumber.open(source)


def read_document(source: PdfSource, *, label: Optional[str] = None) -> SourceDocument:
    """Extract page texts and page graphics from a PDF file, stream or buffer."""

    name = label or (str(source) if isinstance(source, (str, Path)) else "<bytes>")
    pages: list[str] = []
    graphics: list[tuple[RasterGraphic, ...]] = []
    try:
        with _open(source) as pdf:
            for page in pdf.pages:
                text = (page.extract_text() or "").replace(_IDEOGRAPHIC_SPACE, " ")
                pages.append(text)
                graphics.append(tuple(decode_page_image(image) for image in page.images))
    except FileNotFoundError:
        raise
    except Exception as exc:
        raise DocumentError(f"Unable to read PDF document {name}: {exc}", source=name) from exc

    logger.info(
        "Read PDF document",
        extra={
            "event": "pdf.read",
            "source": name,
            "pages": len(pages),
            "graphics": sum(len(items) for items in graphics),
        },
    )
    return SourceDocument(pages=tuple(pages), graphics=tuple(graphics), source=name)
