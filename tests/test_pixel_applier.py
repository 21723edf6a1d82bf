"""Tests for the export-side curve executors."""

import numpy as np
import pytest

from src.symmetryAlign.core.curve_solver import build_channel_lut, solve_curve
from src.symmetryAlign.core.filters import apply_curve
from src.symmetryAlign.core.levels import IDENTITY_LEVELS, LevelsSettings
from src.symmetryAlign.core.raster import RasterBuffer

EXECUTORS = ("auto", "jit", "numpy", "pillow")

SCENARIO = LevelsSettings(
    input_black=20, input_white=230, midpoint=100, output_black=10, output_white=245
)


@pytest.fixture
def raster():
    rng = np.random.default_rng(7)
    pixels = rng.integers(0, 256, size=(13, 17, 4), dtype=np.uint8)
    return RasterBuffer.from_array(pixels)


@pytest.fixture
def params():
    return (
        solve_curve(SCENARIO),
        solve_curve(LevelsSettings(midpoint=60)),
        solve_curve(LevelsSettings(output_black=40, output_white=180)),
    )


@pytest.mark.parametrize("executor", EXECUTORS)
def test_executor_matches_reference_luts(raster, params, executor):
    result = apply_curve(raster, *params, executor=executor)
    assert (result.width, result.height) == (raster.width, raster.height)
    for channel, channel_params in enumerate(params):
        lut = build_channel_lut(channel_params)
        assert np.array_equal(result.pixels[..., channel], lut[raster.pixels[..., channel]])


def test_executors_agree_byte_for_byte(raster, params):
    outputs = [apply_curve(raster, *params, executor=name).pixels for name in EXECUTORS]
    for other in outputs[1:]:
        assert np.array_equal(outputs[0], other)


@pytest.mark.parametrize("executor", EXECUTORS)
def test_alpha_passes_through(raster, params, executor):
    result = apply_curve(raster, *params, executor=executor)
    assert np.array_equal(result.pixels[..., 3], raster.pixels[..., 3])


@pytest.mark.parametrize("executor", EXECUTORS)
def test_source_raster_is_not_modified(raster, params, executor):
    before = raster.writable_copy()
    result = apply_curve(raster, *params, executor=executor)
    assert result is not raster
    assert np.array_equal(raster.pixels, before)


def test_identity_curve_reproduces_source(raster):
    identity = solve_curve(IDENTITY_LEVELS)
    result = apply_curve(raster, identity, identity, identity, executor="numpy")
    assert np.array_equal(result.pixels, raster.pixels)


def test_concrete_scenario_on_pixels():
    pixels = np.array([[[20, 230, 100, 255], [0, 255, 50, 128]]], dtype=np.uint8)
    params = solve_curve(SCENARIO)
    result = apply_curve(RasterBuffer.from_array(pixels), params, params, params)
    first = result.pixels[0, 0]
    assert first[0] == 10
    assert first[1] == 245
    assert abs(int(first[2]) - 127) <= 1
    second = result.pixels[0, 1]
    assert (second[0], second[1], second[3]) == (10, 245, 128)


def test_raising_black_point_clips_and_keeps_order(raster):
    for black in (0, 25, 50, 75, 100):
        params = solve_curve(LevelsSettings(input_black=black, midpoint=128))
        result = apply_curve(raster, params, params, params, executor="numpy")
        source = raster.pixels[..., :3]
        output = result.pixels[..., :3]
        assert np.all(output[source <= black] == 0)
        order = np.argsort(source.reshape(-1), kind="stable")
        assert np.all(np.diff(output.reshape(-1)[order].astype(int)) >= 0)


@pytest.mark.parametrize("executor", EXECUTORS)
def test_empty_raster(executor):
    identity = solve_curve(IDENTITY_LEVELS)
    result = apply_curve(RasterBuffer.blank(0, 0), identity, identity, identity, executor=executor)
    assert result.is_empty


def test_unknown_executor_raises(raster, params):
    with pytest.raises(ValueError):
        apply_curve(raster, *params, executor="cuda")
