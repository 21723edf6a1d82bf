"""Tone-curve transform engine.

The public operations are pure functions of explicit inputs:
- build_histogram: intensity distribution of a sample of the source raster
- solve_curve: levels settings to linear / gamma / linear coefficients
- apply_curve: authoritative full-resolution export pass
- describe_preview: declarative filter graph for real-time renderers
- auto_levels: percentile-clipped black and white input points
"""

from __future__ import annotations

from .auto_levels import apply_auto_levels, auto_levels
from .curve_solver import CurveParameters, solve_curve
from .filters import apply_curve
from .histogram import build_histogram
from .levels import ChannelMode, EditTarget, LevelsSession, LevelsSettings
from .preview import FilterGraphDescriptor, describe_preview
from .raster import RasterBuffer

__all__ = [
    "ChannelMode",
    "CurveParameters",
    "EditTarget",
    "FilterGraphDescriptor",
    "LevelsSession",
    "LevelsSettings",
    "RasterBuffer",
    "apply_auto_levels",
    "apply_curve",
    "auto_levels",
    "build_histogram",
    "describe_preview",
    "solve_curve",
]
