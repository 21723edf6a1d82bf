"""Custom widgets of the levels editor."""

from .levels_histogram import LevelsHistogramWidget

__all__ = ["LevelsHistogramWidget"]
