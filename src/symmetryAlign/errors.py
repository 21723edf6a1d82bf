"""Exception hierarchy shared across SymmetryAlign."""

from __future__ import annotations


class SymmetryAlignError(Exception):
    """Base class for all errors raised by SymmetryAlign."""


class RasterContractError(SymmetryAlignError, ValueError):
    """Raised when a collaborator hands over a buffer that breaks the RGBA contract."""


class ConfigInvalidError(SymmetryAlignError):
    """Raised when the engine configuration cannot be parsed or validated."""


class ExportError(SymmetryAlignError):
    """Raised when the final raster cannot be encoded or written."""


__all__ = [
    "ConfigInvalidError",
    "ExportError",
    "RasterContractError",
    "SymmetryAlignError",
]
