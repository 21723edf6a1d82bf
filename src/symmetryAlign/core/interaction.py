"""Pointer-driven control points of the levels histogram.

This module owns the drag state machine and the ordering constraints of the
black, mid and white input handles without any direct UI interaction.  The
widget layer only forwards horizontal pointer positions in track coordinates.
"""

from __future__ import annotations

import math
from enum import Enum

from .levels import EditTarget, LevelsSession, LevelsSettings

DEFAULT_TRACK_WIDTH = 280.0
DEFAULT_HIT_RADIUS = 15.0


class DragState(Enum):
    """Which handle, if any, is being dragged."""

    IDLE = "idle"
    DRAGGING_BLACK = "black"
    DRAGGING_WHITE = "white"
    DRAGGING_MID = "mid"


_DRAG_KEYS = {
    DragState.DRAGGING_BLACK: "input_black",
    DragState.DRAGGING_WHITE: "input_white",
    DragState.DRAGGING_MID: "midpoint",
}


class LevelsControlModel:
    """Manage the three input control points of the selected channel."""

    def __init__(
        self,
        session: LevelsSession,
        *,
        track_width: float = DEFAULT_TRACK_WIDTH,
        hit_radius: float = DEFAULT_HIT_RADIUS,
        target: EditTarget = EditTarget.COMPOSITE,
    ) -> None:
        self._session = session
        self._track_width = float(track_width)
        self._hit_radius = float(hit_radius)
        self._target = target
        self._state = DragState.IDLE

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> DragState:
        return self._state

    @property
    def target(self) -> EditTarget:
        return self._target

    @property
    def session(self) -> LevelsSession:
        return self._session

    @property
    def track_width(self) -> float:
        return self._track_width

    def set_track_width(self, width: float) -> None:
        """Update the track width after the widget was resized."""
        self._track_width = max(1.0, float(width))

    def settings(self) -> LevelsSettings:
        return self._session.settings(self._target)

    def select_target(self, target: EditTarget) -> bool:
        """Switch the edited channel; ignored while a drag is in progress.

        Returns True when the target changed.
        """
        if self._state is not DragState.IDLE or target is self._target:
            return False
        self._target = target
        return True

    # ------------------------------------------------------------------
    # Coordinate helpers
    # ------------------------------------------------------------------
    def value_to_x(self, value: float) -> float:
        return (float(value) / 255.0) * self._track_width

    def x_to_value(self, x: float) -> int:
        # Round half up so the handle snaps the same way in both directions.
        value = math.floor((float(x) / self._track_width) * 255.0 + 0.5)
        return int(max(0, min(255, value)))

    def handle_positions(self) -> tuple[float, float, float]:
        """Return the ``(black, mid, white)`` x positions of the handles."""
        current = self.settings()
        return (
            self.value_to_x(current.input_black),
            self.value_to_x(current.midpoint),
            self.value_to_x(current.input_white),
        )

    def show_midpoint_handle(self) -> bool:
        current = self.settings()
        return current.input_white > current.input_black + 2

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------
    def press(self, x: float) -> DragState:
        """Start dragging the handle under *x*, if any.

        The midpoint is tested first because it usually sits between the other
        two handles and would otherwise be shadowed by them.
        """
        black_x, mid_x, white_x = self.handle_positions()
        if abs(x - mid_x) < self._hit_radius:
            self._state = DragState.DRAGGING_MID
        elif abs(x - black_x) < self._hit_radius:
            self._state = DragState.DRAGGING_BLACK
        elif abs(x - white_x) < self._hit_radius:
            self._state = DragState.DRAGGING_WHITE
        return self._state

    def move(self, x: float) -> LevelsSettings | None:
        """Apply a pointer move; returns the new settings or ``None`` when idle."""
        if self._state is DragState.IDLE:
            return None

        x = max(0.0, min(self._track_width, float(x)))
        value = self.x_to_value(x)
        # Handle limits are enforced per channel by the session, so a composite
        # drag respects each channel's own midpoint.
        key = _DRAG_KEYS[self._state]
        return self._session.update(self._target, **{key: value})

    def release(self) -> None:
        self._state = DragState.IDLE

    def leave(self) -> None:
        self._state = DragState.IDLE


__all__ = [
    "DEFAULT_HIT_RADIUS",
    "DEFAULT_TRACK_WIDTH",
    "DragState",
    "LevelsControlModel",
]
