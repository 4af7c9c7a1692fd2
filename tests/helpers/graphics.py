"""Raster fixtures for correlator and PNG encoding tests."""

from __future__ import annotations

import io

from signal_plan.core.models import RasterGraphic


def build_graphic(
    width: int = 2, height: int = 2, *, channels: int = 3, fill: int = 128
) -> RasterGraphic:
    return RasterGraphic(
        width=width, height=height, data=bytes([fill]) * (width * height * channels)
    )


def build_png_bytes(width: int = 3, height: int = 2, color=(255, 0, 0)) -> bytes:
    """Encode a solid RGB image as PNG with Pillow."""

    from PIL import Image

    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()
