"""Bridge between :class:`QImage` pixel buffers and :class:`RasterBuffer`.

Rasters cross into Qt as ``Format_RGBA8888`` images, whose byte order matches
the RGBA contract; only the scanline padding has to be stripped on the way back.
"""

from __future__ import annotations

import numpy as np
from PySide6.QtGui import QImage

from ..raster import CHANNELS, RasterBuffer


def _scanlines(image: QImage) -> np.ndarray:
    """Return a ``(height, bytesPerLine)`` ``uint8`` view over *image*'s bits.

    ``constBits`` is a flat or shaped ``memoryview`` depending on the PySide6
    release; the view may also run past the last scanline, so it is trimmed.
    """

    stride = image.bytesPerLine()
    height = image.height()
    view = memoryview(image.constBits())
    if view.ndim != 1 or view.format != "B":
        view = view.cast("B")
    flat = np.frombuffer(view, dtype=np.uint8, count=stride * height)
    return flat.reshape((height, stride))


def raster_from_qimage(image: QImage) -> RasterBuffer:
    """Copy *image* into a :class:`RasterBuffer` (RGBA byte order)."""

    if image.isNull():
        return RasterBuffer.blank(0, 0)

    converted = image.convertToFormat(QImage.Format.Format_RGBA8888)
    width = converted.width()
    height = converted.height()
    if width <= 0 or height <= 0:
        return RasterBuffer.blank(0, 0)

    # ``from_array`` copies, so the view never outlives *converted*.
    pixels = _scanlines(converted)[:, : width * CHANNELS].reshape((height, width, CHANNELS))
    return RasterBuffer.from_array(pixels)


def qimage_from_raster(raster: RasterBuffer) -> QImage:
    """Return a detached ``Format_RGBA8888`` :class:`QImage` holding *raster*."""

    if raster.is_empty:
        return QImage()

    data = np.ascontiguousarray(raster.pixels).tobytes()
    image = QImage(
        data,
        raster.width,
        raster.height,
        raster.width * CHANNELS,
        QImage.Format.Format_RGBA8888,
    )
    # ``QImage`` does not own *data*; ``copy`` detaches it before the bytes go away.
    return image.copy()


__all__ = ["qimage_from_raster", "raster_from_qimage"]
