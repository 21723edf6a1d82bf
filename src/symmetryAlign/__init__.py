"""SymmetryAlign: align two exposures and tone-correct them before export."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
