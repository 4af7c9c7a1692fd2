"""Pixel conversion and PNG encoding for extracted page graphics."""

from __future__ import annotations

import base64
import io

import numpy as np
from PIL import Image

from .core.models import RasterGraphic

__all__ = ["to_rgba", "encode_png", "to_data_url"]

_PNG_MIME = "image/png"


def to_rgba(graphic: RasterGraphic) -> np.ndarray:
    """Return ``graphic`` as an ``(height, width, 4)`` ``uint8`` array.

    RGBA buffers pass through, RGB buffers gain an opaque alpha channel and
    single-channel buffers are treated as grey.  Buffers of any other size
    produce a transparent canvas of the declared dimensions.
    """

    height, width = max(0, graphic.height), max(0, graphic.width)
    canvas = np.zeros((height, width, 4), dtype=np.uint8)
    channels = graphic.channels
    if channels not in (1, 3, 4):
        return canvas

    pixels = np.frombuffer(graphic.data, dtype=np.uint8).reshape(height, width, channels)
    if channels == 4:
        canvas[...] = pixels
    else:
        canvas[..., :3] = pixels
        canvas[..., 3] = 255
    return canvas


def encode_png(graphic: RasterGraphic) -> bytes:
    if graphic.width <= 0 or graphic.height <= 0:
        # already-encoded payloads carry no pixel dimensions
        return bytes(graphic.data)
    image = Image.fromarray(to_rgba(graphic))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def to_data_url(graphic: RasterGraphic) -> str:
    encoded = base64.b64encode(encode_png(graphic)).decode("ascii")
    return f"data:{_PNG_MIME};base64,{encoded}"
