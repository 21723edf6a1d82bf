"""Levels settings and the per-channel session store."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Mapping

from .curve_solver import CurveParameters, solve_curve

# Session key constants, in the order the sidebar presents them.
LEVELS_KEYS = (
    "input_black",
    "input_white",
    "midpoint",
    "output_black",
    "output_white",
)


class ChannelMode(Enum):
    """Scalar extracted per pixel when building a histogram."""

    LUMINANCE = "luminance"
    RED = "red"
    GREEN = "green"
    BLUE = "blue"


class EditTarget(Enum):
    """Channel selected in the levels panel."""

    COMPOSITE = "rgb"
    RED = "red"
    GREEN = "green"
    BLUE = "blue"

    @property
    def channel_mode(self) -> ChannelMode:
        return _HISTOGRAM_MODE[self]

    @property
    def fan_out(self) -> tuple["EditTarget", ...]:
        """Records written when this target is edited."""

        return _FAN_OUT[self]


_HISTOGRAM_MODE: Mapping[EditTarget, ChannelMode] = {
    EditTarget.COMPOSITE: ChannelMode.LUMINANCE,
    EditTarget.RED: ChannelMode.RED,
    EditTarget.GREEN: ChannelMode.GREEN,
    EditTarget.BLUE: ChannelMode.BLUE,
}

_FAN_OUT: Mapping[EditTarget, tuple[EditTarget, ...]] = {
    EditTarget.COMPOSITE: (
        EditTarget.RED,
        EditTarget.GREEN,
        EditTarget.BLUE,
    ),
    EditTarget.RED: (EditTarget.RED,),
    EditTarget.GREEN: (EditTarget.GREEN,),
    EditTarget.BLUE: (EditTarget.BLUE,),
}

RGB_TARGETS = (EditTarget.RED, EditTarget.GREEN, EditTarget.BLUE)


def _clamp_byte(value: float) -> int:
    return int(max(0, min(255, int(value))))


@dataclass(frozen=True)
class LevelsSettings:
    """Five control values of one channel, all in ``[0, 255]``."""

    input_black: int = 0
    input_white: int = 255
    midpoint: int = 128
    output_black: int = 0
    output_white: int = 255

    def is_identity(self) -> bool:
        return self == IDENTITY_LEVELS

    def to_dict(self) -> dict[str, int]:
        return {key: int(getattr(self, key)) for key in LEVELS_KEYS}

    @staticmethod
    def from_dict(data: Mapping[str, float]) -> "LevelsSettings":
        """Return settings read from *data*, falling back to identity per key."""

        values = {
            key: _clamp_byte(data.get(key, getattr(IDENTITY_LEVELS, key)))
            for key in LEVELS_KEYS
        }
        return LevelsSettings(**values)


IDENTITY_LEVELS = LevelsSettings()


def _saturate(settings: LevelsSettings, changed: frozenset[str]) -> LevelsSettings:
    """Restore ``black < midpoint < white`` after the keys in *changed* were written.

    A moved input point stops short of the points it was not moved together
    with, and the midpoint is pulled back inside the input range.
    """

    black = settings.input_black
    mid = settings.midpoint
    white = settings.input_white
    moves_black = "input_black" in changed
    moves_white = "input_white" in changed

    if moves_black and not moves_white:
        black = min(black, white - 2)
        if "midpoint" not in changed:
            black = min(black, mid - 1)
    elif moves_white and not moves_black:
        white = max(white, black + 2)
        if "midpoint" not in changed:
            white = max(white, mid + 1)
    elif moves_black and moves_white and white - black < 2:
        white = min(255, black + 2)
        black = white - 2

    mid = max(black + 1, min(white - 1, mid))
    if (black, mid, white) == (settings.input_black, settings.midpoint, settings.input_white):
        return settings
    return replace(settings, input_black=black, midpoint=mid, input_white=white)


class LevelsSession:
    """Own the red, green and blue levels records of the image being edited.

    There is no composite record: the composite target reads the red record
    for display and writes each changed key into all three channels, so the
    keys a composite edit does not name keep their per-channel values.
    """

    def __init__(self) -> None:
        self._records: dict[EditTarget, LevelsSettings] = {}
        self.reset()

    def reset(self) -> None:
        """Restore identity levels on every record (fresh image)."""

        self._records = {target: IDENTITY_LEVELS for target in RGB_TARGETS}

    def settings(self, target: EditTarget) -> LevelsSettings:
        if target is EditTarget.COMPOSITE:
            return self._records[EditTarget.RED]
        return self._records[target]

    def update(self, target: EditTarget, **changes: int) -> LevelsSettings:
        """Write *changes* into every channel *target* fans out to.

        Each channel is saturated against its own remaining values, so a
        moved input point never crosses that channel's midpoint and the
        midpoint never leaves the input range.  Returns the record shown for
        *target*.
        """

        unknown = set(changes) - set(LEVELS_KEYS)
        if unknown:
            raise KeyError(f"Unknown levels keys: {', '.join(sorted(unknown))}")
        clean = {key: _clamp_byte(value) for key, value in changes.items()}
        changed = frozenset(clean)
        for member in target.fan_out:
            self._records[member] = _saturate(replace(self._records[member], **clean), changed)
        return self.settings(target)

    def set_output_levels(self, target: EditTarget, black: int, white: int) -> LevelsSettings:
        """Update the output range, saturating so ``white > black`` always holds."""

        black = min(_clamp_byte(black), 254)
        white = max(_clamp_byte(white), black + 1)
        return self.update(target, output_black=black, output_white=white)

    def curve_parameters(self) -> tuple[CurveParameters, CurveParameters, CurveParameters]:
        """Return the solved ``(red, green, blue)`` curve parameters snapshot."""

        return tuple(solve_curve(self._records[target]) for target in RGB_TARGETS)

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {target.value: self._records[target].to_dict() for target in RGB_TARGETS}


__all__ = [
    "ChannelMode",
    "EditTarget",
    "IDENTITY_LEVELS",
    "LEVELS_KEYS",
    "LevelsSession",
    "LevelsSettings",
    "RGB_TARGETS",
]
