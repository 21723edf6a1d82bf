"""Tests for histogram acquisition over the sampled raster."""

import numpy as np
import pytest

from src.symmetryAlign.core.histogram import (
    BUCKETS,
    build_histogram,
    normalise_histogram,
    sample_raster,
)
from src.symmetryAlign.core.levels import ChannelMode
from src.symmetryAlign.core.raster import RasterBuffer


def _solid(width, height, rgb, alpha=255):
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[..., :3] = rgb
    pixels[..., 3] = alpha
    return RasterBuffer.from_array(pixels)


def _random_raster(width, height, seed=0):
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    pixels[..., 3] = 255
    return RasterBuffer.from_array(pixels)


def test_full_resolution_histogram_counts_every_pixel():
    raster = _random_raster(40, 30)
    for mode in ChannelMode:
        hist = build_histogram(raster, None, mode)
        assert hist.shape == (BUCKETS,)
        assert int(hist.sum()) == 40 * 30


def test_histogram_counts_sampled_pixels():
    raster = _random_raster(40, 30)
    hist = build_histogram(raster, 20)
    # 20 columns keep the 4:3 aspect ratio -> 15 rows.
    assert int(hist.sum()) == 20 * 15


def test_sample_keeps_aspect_ratio():
    raster = _random_raster(600, 400)
    sample = sample_raster(raster, 300)
    assert sample.shape == (200, 300, 4)


def test_sample_height_never_drops_to_zero():
    raster = _random_raster(1000, 2)
    sample = sample_raster(raster, 10)
    assert sample.shape == (1, 10, 4)


def test_sample_skips_resampling_when_size_matches():
    raster = _random_raster(300, 150)
    assert sample_raster(raster, 300) is raster.pixels
    assert sample_raster(raster, None) is raster.pixels


def test_channel_modes_read_the_selected_component():
    raster = _solid(4, 4, (10, 20, 30))
    assert build_histogram(raster, None, ChannelMode.RED)[10] == 16
    assert build_histogram(raster, None, ChannelMode.GREEN)[20] == 16
    assert build_histogram(raster, None, ChannelMode.BLUE)[30] == 16


@pytest.mark.parametrize(
    ("rgb", "bucket"),
    [((10, 20, 30), 18), ((255, 255, 255), 255), ((0, 0, 0), 0), ((255, 0, 0), 76)],
)
def test_luminance_uses_rec601_weights_rounded(rgb, bucket):
    raster = _solid(2, 2, rgb)
    hist = build_histogram(raster, None, ChannelMode.LUMINANCE)
    assert hist[bucket] == 4


def test_solid_image_survives_resampling():
    raster = _solid(640, 480, (90, 90, 90))
    hist = build_histogram(raster, 300, ChannelMode.RED)
    assert hist[90] == int(hist.sum())


def test_empty_raster_yields_zero_histogram():
    hist = build_histogram(RasterBuffer.blank(0, 0))
    assert hist.shape == (BUCKETS,)
    assert int(hist.sum()) == 0


def test_normalise_scales_by_tallest_bucket():
    hist = np.zeros(256, dtype=np.int64)
    hist[3] = 10
    hist[7] = 40
    normalised = normalise_histogram(hist)
    assert normalised[7] == pytest.approx(1.0)
    assert normalised[3] == pytest.approx(0.25)


def test_normalise_guards_empty_histogram():
    normalised = normalise_histogram(np.zeros(256, dtype=np.int64))
    assert np.all(normalised == 0.0)
