"""Export-side pixel transform package.

This package applies the solved tone curves to full-resolution rasters with a
clean separation of concerns:
- facade: executor selection and LUT resolution
- executors: Numba JIT, NumPy and Pillow implementations
- utils: QImage buffer bridging
"""

from __future__ import annotations

from .facade import apply_curve

__all__ = ["apply_curve"]
