"""Percentile-clipping auto levels."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from .levels import EditTarget, LevelsSession, LevelsSettings

LOGGER = logging.getLogger(__name__)

DEFAULT_CLIP_FRACTION = 0.001
IDENTITY_POINTS = (0, 255)


def auto_levels(
    histogram: Sequence[int] | np.ndarray,
    clip_fraction: float = DEFAULT_CLIP_FRACTION,
) -> tuple[int, int] | None:
    """Return ``(black, white)`` input points clipping *clip_fraction* per tail.

    ``None`` signals an empty histogram, in which case callers leave the
    settings untouched.  When the two scans meet or cross (for example on a
    flat image) the identity pair is returned instead.
    """

    counts = np.asarray(histogram, dtype=np.int64)
    total = int(counts.sum())
    if total <= 0:
        return None

    threshold = total * float(clip_fraction)

    black = 0
    cumulative = 0
    for index in range(counts.size):
        cumulative += int(counts[index])
        if cumulative >= threshold:
            black = index
            break

    white = 255
    cumulative = 0
    for index in range(counts.size - 1, -1, -1):
        cumulative += int(counts[index])
        if cumulative >= threshold:
            white = index
            break

    # A midpoint must fit strictly between the two points.
    if black >= white - 1:
        return IDENTITY_POINTS
    return black, white


def apply_auto_levels(
    session: LevelsSession,
    target: EditTarget,
    histogram: Sequence[int] | np.ndarray,
    clip_fraction: float = DEFAULT_CLIP_FRACTION,
) -> LevelsSettings:
    """Write the auto-levels input points of *histogram* into *session*.

    Output points are never touched.  Each channel keeps its own midpoint
    unless it would leave the open interval ``(black, white)``, in which case
    the session clamps it into ``[black + 1, white - 1]``.
    """

    points = auto_levels(histogram, clip_fraction)
    current = session.settings(target)
    if points is None:
        return current

    black, white = points
    LOGGER.debug("Auto levels for %s resolved to (%d, %d)", target.value, black, white)
    return session.update(target, input_black=black, input_white=white)


__all__ = ["DEFAULT_CLIP_FRACTION", "apply_auto_levels", "auto_levels"]
