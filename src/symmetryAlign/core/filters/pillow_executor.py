"""Pillow-based curve executor using ``Image.point`` lookup tables.

Pillow applies per-band tables in native code, which is particularly efficient
for large images that are already held as Pillow images by the output sink.
"""

from __future__ import annotations

import numpy as np
from PIL import Image

from ..raster import RasterBuffer


def apply_luts_with_pillow(buffer: RasterBuffer, luts: np.ndarray) -> RasterBuffer:
    """Return a new raster with *luts* applied through ``Image.point``."""

    if buffer.is_empty:
        return RasterBuffer.blank(buffer.width, buffer.height)

    pil_image = Image.frombuffer(
        "RGBA",
        (buffer.width, buffer.height),
        buffer.to_bytes(),
        "raw",
        "RGBA",
        0,
        1,
    )
    # One 256-entry table per band; the alpha band gets an identity table so
    # transparency remains untouched.
    alpha_table = list(range(256))
    table: list[int] = [int(v) for v in np.asarray(luts, dtype=np.uint8).reshape(-1)] + alpha_table
    adjusted = pil_image.point(table)
    return RasterBuffer.from_array(np.asarray(adjusted, dtype=np.uint8))
