"""NumPy vectorised curve executor."""

from __future__ import annotations

import numpy as np

from ..raster import RasterBuffer


def apply_luts_vectorized(buffer: RasterBuffer, luts: np.ndarray) -> RasterBuffer:
    """Return a new raster with the ``(3, 256)`` *luts* applied via fancy indexing."""

    result = buffer.writable_copy()
    if buffer.is_empty:
        return RasterBuffer(buffer.width, buffer.height, result)

    for channel in range(3):
        result[..., channel] = luts[channel][buffer.pixels[..., channel]]
    return RasterBuffer(buffer.width, buffer.height, result)
