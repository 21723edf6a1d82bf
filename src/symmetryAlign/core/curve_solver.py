"""Convert levels control values into the three-stage tone curve.

The curve is a linear stretch followed by a power (gamma) stage and a linear
output remap.  Coefficients operate on values normalised to ``[0, 1]`` so the
export applier and the preview descriptor can share them verbatim.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from .levels import LevelsSettings

MID_NORM_MIN = 0.01
MID_NORM_MAX = 0.99

QUANTIZE_EPSILON = 1e-6
"""Absorbs binary representation error before flooring, e.g. ``10 / 255 * 255``."""


@dataclass(frozen=True)
class CurveParameters:
    """Coefficients of one channel's tone curve."""

    input_slope: float = 1.0
    input_intercept: float = 0.0
    exponent: float = 1.0
    output_slope: float = 1.0
    output_intercept: float = 0.0


def _clamp(value: float, minimum: float, maximum: float) -> float:
    if value < minimum:
        return minimum
    if value > maximum:
        return maximum
    return value


def solve_curve(settings: "LevelsSettings") -> CurveParameters:
    """Return the :class:`CurveParameters` realising *settings*.

    A white point at or below the black point is treated as ``black + 1`` so
    the stretch never divides by zero; the stored settings are not touched.
    The normalised midpoint is clamped into ``[0.01, 0.99]`` before taking the
    logarithm, which keeps the exponent finite and positive.
    """

    black = float(settings.input_black)
    white = float(settings.input_white)
    if white <= black:
        white = black + 1.0

    input_range = white - black
    input_slope = 255.0 / input_range
    # Same operation order as ``value / 255 * slope`` so the black point lands
    # on exactly 0.0; a residual there would be blown up by small exponents.
    input_intercept = -(black / 255.0) * input_slope

    mid_norm = _clamp((float(settings.midpoint) - black) / input_range, MID_NORM_MIN, MID_NORM_MAX)
    # mid_norm ** exponent == 0.5 maps the chosen midpoint onto mid-grey.
    exponent = math.log(0.5) / math.log(mid_norm)

    output_range = float(settings.output_white) - float(settings.output_black)
    output_slope = output_range / 255.0
    output_intercept = float(settings.output_black) / 255.0

    return CurveParameters(
        input_slope=input_slope,
        input_intercept=input_intercept,
        exponent=exponent,
        output_slope=output_slope,
        output_intercept=output_intercept,
    )


def evaluate_channel(params: CurveParameters, value: int) -> int:
    """Return the 8-bit output of the curve for the input byte *value*.

    This is the authoritative per-channel pipeline used by the export path:
    normalise, stretch and clamp, gamma, remap and clamp, then floor.
    """

    x = float(value) / 255.0
    x = _clamp(x * params.input_slope + params.input_intercept, 0.0, 1.0)
    x = math.pow(x, params.exponent)
    x = _clamp(x * params.output_slope + params.output_intercept, 0.0, 1.0)
    return int(min(255, math.floor(x * 255.0 + QUANTIZE_EPSILON)))


def build_channel_lut(params: CurveParameters) -> np.ndarray:
    """Tabulate :func:`evaluate_channel` for every byte as a ``uint8`` array."""

    return np.array([evaluate_channel(params, value) for value in range(256)], dtype=np.uint8)


def build_rgb_luts(
    params_r: CurveParameters,
    params_g: CurveParameters,
    params_b: CurveParameters,
) -> np.ndarray:
    """Return a ``(3, 256)`` ``uint8`` table, one row per colour channel."""

    return np.stack(
        [build_channel_lut(params_r), build_channel_lut(params_g), build_channel_lut(params_b)]
    )


__all__ = [
    "CurveParameters",
    "MID_NORM_MAX",
    "MID_NORM_MIN",
    "QUANTIZE_EPSILON",
    "build_channel_lut",
    "build_rgb_luts",
    "evaluate_channel",
    "solve_curve",
]
