"""Entry point of the export-side pixel transform.

The facade resolves the three channel curves into lookup tables once and
hands them to the best available executor.  All executors index the same
tables, so their outputs are identical byte for byte.
"""

from __future__ import annotations

import logging
from typing import Callable

import numpy as np

from ..curve_solver import CurveParameters, build_rgb_luts
from ..raster import RasterBuffer
from .jit_executor import apply_luts_jit
from .numpy_executor import apply_luts_vectorized
from .pillow_executor import apply_luts_with_pillow

_LOGGER = logging.getLogger(__name__)

_EXECUTORS: dict[str, Callable[[RasterBuffer, np.ndarray], RasterBuffer]] = {
    "jit": apply_luts_jit,
    "numpy": apply_luts_vectorized,
    "pillow": apply_luts_with_pillow,
}


def apply_curve(
    buffer: RasterBuffer,
    params_r: CurveParameters,
    params_g: CurveParameters,
    params_b: CurveParameters,
    *,
    executor: str = "auto",
) -> RasterBuffer:
    """Return a new raster with each colour channel mapped through its curve.

    Parameters
    ----------
    buffer:
        Full-resolution source raster.  It is never modified.
    params_r, params_g, params_b:
        Resolved curve of each colour channel.  A composite edit simply passes
        the same parameters three times.
    executor:
        ``"auto"`` (JIT with NumPy fallback), ``"jit"``, ``"numpy"`` or
        ``"pillow"``.  Any other value raises :class:`ValueError`.
    """

    luts = build_rgb_luts(params_r, params_g, params_b)

    if executor == "auto":
        try:
            return apply_luts_jit(buffer, luts)
        except Exception:
            _LOGGER.warning("JIT curve kernel failed; falling back to NumPy", exc_info=True)
            return apply_luts_vectorized(buffer, luts)

    try:
        run = _EXECUTORS[executor]
    except KeyError:
        raise ValueError(f"Unknown executor: {executor!r}") from None
    return run(buffer, luts)


__all__ = ["apply_curve"]
