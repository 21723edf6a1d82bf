"""Tests for the alignment state and export canvas composition."""

import numpy as np
import pytest

from src.symmetryAlign.core.alignment import (
    DEFAULT_GHOST_OPACITY,
    ROTATION_STEP,
    AlignmentState,
    canvas_size,
    compose_export_canvas,
)
from src.symmetryAlign.core.raster import RasterBuffer


def _opaque_layer(width, height, rgb=(200, 30, 30)):
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[..., :3] = rgb
    pixels[..., 3] = 255
    return RasterBuffer.from_array(pixels)


def _opaque_bounds(raster):
    rows, cols = np.nonzero(raster.pixels[..., 3])
    return int(cols.min()), int(rows.min()), int(cols.max()) + 1, int(rows.max()) + 1


def test_canvas_side_is_padded_diagonal():
    assert canvas_size(30, 40, 1.0) == 50
    assert canvas_size(30, 40, 2.0) == 100
    assert canvas_size(10, 6, 2.0) == 24


def test_unrotated_layer_is_centred():
    canvas = compose_export_canvas(_opaque_layer(10, 6), AlignmentState(), padding=2.0)
    assert (canvas.width, canvas.height) == (24, 24)
    assert _opaque_bounds(canvas) == (7, 9, 17, 15)
    assert canvas.pixels[12, 12].tolist() == [200, 30, 30, 255]
    assert canvas.pixels[0, 0, 3] == 0


def test_offset_moves_the_layer():
    alignment = AlignmentState(offset_x=3.0, offset_y=2.0)
    canvas = compose_export_canvas(_opaque_layer(10, 6), alignment, padding=2.0)
    assert _opaque_bounds(canvas) == (10, 11, 20, 17)


def test_quarter_turn_rotates_offset_with_layer():
    alignment = AlignmentState(offset_x=2.0, offset_y=0.0, rotation=90.0)
    canvas = compose_export_canvas(_opaque_layer(10, 6), alignment, padding=2.0)
    # The layer becomes 6 wide and 10 tall; +x in the rotated frame points down.
    assert _opaque_bounds(canvas) == (9, 9, 15, 19)


def test_offsets_past_the_edge_are_clipped():
    alignment = AlignmentState(offset_x=100.0)
    canvas = compose_export_canvas(_opaque_layer(10, 6), alignment, padding=2.0)
    assert (canvas.width, canvas.height) == (24, 24)
    assert int(canvas.pixels[..., 3].max()) == 0


def test_empty_layer_gives_transparent_canvas():
    canvas = compose_export_canvas(RasterBuffer.blank(0, 0), AlignmentState())
    assert canvas.is_empty


def test_rotation_is_clamped_and_nudged():
    state = AlignmentState()
    state.nudge_rotation(3)
    assert state.rotation == pytest.approx(3 * ROTATION_STEP)
    state.nudge_rotation(-5)
    assert state.rotation == pytest.approx(-2 * ROTATION_STEP)
    state.set_rotation(400)
    assert state.rotation == pytest.approx(180.0)
    state.set_rotation(-400)
    assert state.rotation == pytest.approx(-180.0)


def test_move_and_reset():
    state = AlignmentState()
    state.move_by(4, -2)
    state.move_by(1.5, 1)
    assert (state.offset_x, state.offset_y) == (pytest.approx(5.5), pytest.approx(-1.0))
    state.reset()
    assert (state.offset_x, state.offset_y, state.rotation) == (0.0, 0.0, 0.0)


def test_ghost_defaults():
    state = AlignmentState()
    assert state.show_ghost is True
    assert state.ghost_opacity == pytest.approx(DEFAULT_GHOST_OPACITY)
    assert (state.mirror_h, state.mirror_v) == (True, False)
    assert state.ghost_scale() == (-1, 1)


@pytest.mark.parametrize(("opacity", "expected"), [(0.25, 0.25), (-1.0, 0.0), (3.0, 1.0)])
def test_ghost_opacity_is_clamped(opacity, expected):
    state = AlignmentState()
    state.set_ghost_opacity(opacity)
    assert state.ghost_opacity == pytest.approx(expected)
    assert AlignmentState(ghost_opacity=opacity).ghost_opacity == pytest.approx(expected)


def test_ghost_toggles():
    state = AlignmentState()
    assert state.toggle_mirror_h() is False
    assert state.toggle_mirror_v() is True
    assert state.ghost_scale() == (1, -1)
    assert state.toggle_ghost() is False
    assert state.show_ghost is False


def test_reset_keeps_ghost_settings():
    state = AlignmentState()
    state.toggle_ghost()
    state.toggle_mirror_v()
    state.set_ghost_opacity(0.8)
    state.move_by(3, 3)
    state.reset()
    assert (state.offset_x, state.offset_y) == (0.0, 0.0)
    assert (state.show_ghost, state.mirror_v) == (False, True)
    assert state.ghost_opacity == pytest.approx(0.8)

    state.reset_ghost()
    assert state == AlignmentState()
