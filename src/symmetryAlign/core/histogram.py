"""Histogram acquisition over a downsampled sample of the source raster."""

from __future__ import annotations

import logging

import numpy as np
from numba import jit
from PIL import Image

from .levels import ChannelMode
from .raster import RasterBuffer

LOGGER = logging.getLogger(__name__)

BUCKETS = 256
DEFAULT_SAMPLE_WIDTH = 300

_MODE_INDEX = {
    ChannelMode.LUMINANCE: -1,
    ChannelMode.RED: 0,
    ChannelMode.GREEN: 1,
    ChannelMode.BLUE: 2,
}


def sample_raster(buffer: RasterBuffer, sample_width: int | None = DEFAULT_SAMPLE_WIDTH) -> np.ndarray:
    """Return the ``(H, W, 4)`` pixels sampled for histogram purposes.

    The sample is resampled to *sample_width* columns while keeping the aspect
    ratio, mirroring the fixed-width canvas the histogram has always been drawn
    from.  ``None`` samples the raster at full resolution.
    """

    if buffer.is_empty or sample_width is None:
        return buffer.pixels

    sample_width = int(sample_width)
    sample_height = max(1, int(sample_width * buffer.height / buffer.width))
    if (sample_width, sample_height) == (buffer.width, buffer.height):
        return buffer.pixels

    image = Image.fromarray(np.ascontiguousarray(buffer.pixels))
    resized = image.resize((sample_width, sample_height), Image.Resampling.BILINEAR)
    return np.asarray(resized, dtype=np.uint8)


@jit(nopython=True, cache=True)
def _accumulate_histogram(pixels: np.ndarray, channel: int) -> np.ndarray:
    """Count intensities of *pixels*; ``channel == -1`` selects luminance."""

    hist = np.zeros(256, dtype=np.int64)
    h, w = pixels.shape[0], pixels.shape[1]
    for y in range(h):
        for x in range(w):
            if channel < 0:
                luma = (
                    0.299 * pixels[y, x, 0]
                    + 0.587 * pixels[y, x, 1]
                    + 0.114 * pixels[y, x, 2]
                )
                # Round half up, then guard the 255 rail against float drift.
                value = int(np.floor(luma + 0.5))
                if value > 255:
                    value = 255
            else:
                value = int(pixels[y, x, channel])
            hist[value] += 1
    return hist


def build_histogram(
    buffer: RasterBuffer,
    sample_width: int | None = DEFAULT_SAMPLE_WIDTH,
    channel_mode: ChannelMode = ChannelMode.LUMINANCE,
) -> np.ndarray:
    """Return 256 bucket counts of *buffer* for *channel_mode*.

    The counts are not normalised; their sum equals the number of sampled pixels.
    An empty raster yields an all-zero histogram.
    """

    if buffer.is_empty:
        return np.zeros(BUCKETS, dtype=np.int64)

    pixels = np.ascontiguousarray(sample_raster(buffer, sample_width))
    hist = _accumulate_histogram(pixels, _MODE_INDEX[channel_mode])
    LOGGER.debug(
        "Histogram built for %s over %dx%d sample",
        channel_mode.value,
        pixels.shape[1],
        pixels.shape[0],
    )
    return hist


def normalise_histogram(hist: np.ndarray) -> np.ndarray:
    """Scale *hist* into ``[0, 1]`` by its tallest bucket for drawing."""

    counts = np.asarray(hist, dtype=np.float32)
    peak = max(1.0, float(counts.max()) if counts.size else 1.0)
    return counts / np.float32(peak)


__all__ = [
    "BUCKETS",
    "DEFAULT_SAMPLE_WIDTH",
    "build_histogram",
    "normalise_histogram",
    "sample_raster",
]
