"""Alignment state and the export canvas composition."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from PIL import Image

from .raster import RasterBuffer

ROTATION_STEP = 0.1
"""Degrees applied by the fine rotation nudge buttons."""

ROTATION_LIMIT = 180.0

DEFAULT_GHOST_OPACITY = 0.5


@dataclass
class AlignmentState:
    """Pixel offset and clockwise rotation of the edited layer.

    The ghost fields describe the mirrored reference overlay drawn under the
    layer.  They are viewing preferences, so :meth:`reset` (run on every image
    load) leaves them alone; :meth:`reset_ghost` restores their defaults.
    """

    offset_x: float = 0.0
    offset_y: float = 0.0
    rotation: float = 0.0
    show_ghost: bool = True
    ghost_opacity: float = DEFAULT_GHOST_OPACITY
    mirror_h: bool = True
    mirror_v: bool = False

    def __post_init__(self) -> None:
        self.set_ghost_opacity(self.ghost_opacity)

    def reset(self) -> None:
        self.offset_x = 0.0
        self.offset_y = 0.0
        self.rotation = 0.0

    def set_rotation(self, degrees: float) -> None:
        self.rotation = max(-ROTATION_LIMIT, min(ROTATION_LIMIT, float(degrees)))

    def nudge_rotation(self, steps: int) -> None:
        """Rotate by ``steps * ROTATION_STEP`` degrees (negative is counter-clockwise)."""
        self.set_rotation(self.rotation + steps * ROTATION_STEP)

    def move_by(self, dx: float, dy: float) -> None:
        self.offset_x += float(dx)
        self.offset_y += float(dy)

    # ------------------------------------------------------------------
    # Ghost overlay
    # ------------------------------------------------------------------
    def set_ghost_opacity(self, opacity: float) -> None:
        self.ghost_opacity = max(0.0, min(1.0, float(opacity)))

    def toggle_ghost(self) -> bool:
        self.show_ghost = not self.show_ghost
        return self.show_ghost

    def toggle_mirror_h(self) -> bool:
        self.mirror_h = not self.mirror_h
        return self.mirror_h

    def toggle_mirror_v(self) -> bool:
        self.mirror_v = not self.mirror_v
        return self.mirror_v

    def ghost_scale(self) -> tuple[int, int]:
        """Return the ``(sx, sy)`` axis scale factors of the ghost; mirrored axes give -1."""
        return (-1 if self.mirror_h else 1, -1 if self.mirror_v else 1)

    def reset_ghost(self) -> None:
        self.show_ghost = True
        self.ghost_opacity = DEFAULT_GHOST_OPACITY
        self.mirror_h = True
        self.mirror_v = False


def canvas_size(width: int, height: int, padding: float = 1.2) -> int:
    """Return the side of the square export canvas for a ``width x height`` layer."""

    return int(math.ceil(math.hypot(width, height) * padding))


def compose_export_canvas(
    raster: RasterBuffer,
    alignment: AlignmentState,
    *,
    padding: float = 1.2,
) -> RasterBuffer:
    """Place *raster* on a transparent square canvas as the viewport shows it.

    The canvas side is the layer diagonal times *padding*, so any rotation
    fits.  The layer is rotated clockwise about its centre, then translated by
    the offset expressed in the rotated frame, exactly like the on-screen
    transform ``rotate(r) translate(x, y)``.
    """

    size = canvas_size(raster.width, raster.height, padding)
    if raster.is_empty:
        return RasterBuffer.blank(size, size)

    canvas = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    layer = Image.fromarray(np.ascontiguousarray(raster.pixels))
    # Pillow rotates counter-clockwise; screen rotation is clockwise (y down).
    rotated = layer.rotate(-alignment.rotation, resample=Image.Resampling.BICUBIC, expand=True)

    theta = math.radians(alignment.rotation)
    dx = alignment.offset_x * math.cos(theta) - alignment.offset_y * math.sin(theta)
    dy = alignment.offset_x * math.sin(theta) + alignment.offset_y * math.cos(theta)

    left = int(round(size / 2.0 + dx - rotated.width / 2.0))
    top = int(round(size / 2.0 + dy - rotated.height / 2.0))
    # The canvas is empty, so a plain paste (which clips offsets that push the
    # layer past the edge) equals compositing over transparency.
    canvas.paste(rotated, (left, top))
    return RasterBuffer.from_array(np.asarray(canvas, dtype=np.uint8))


__all__ = [
    "AlignmentState",
    "DEFAULT_GHOST_OPACITY",
    "ROTATION_STEP",
    "canvas_size",
    "compose_export_canvas",
]
