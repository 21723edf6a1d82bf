"""RGBA raster buffer exchanged with the image source and output sink."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..errors import RasterContractError

CHANNELS = 4
"""Bytes per pixel (R, G, B, A)."""


@dataclass(frozen=True, eq=False)
class RasterBuffer:
    """Row-major RGBA pixels with a top-left origin.

    ``pixels`` is a ``(height, width, 4)`` ``uint8`` array.  The engine treats
    buffers as immutable: transforms always return a fresh instance and the
    array is flagged read-only on construction so accidental in-place writes
    fail loudly instead of corrupting the source image.
    """

    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise RasterContractError(
                f"Raster dimensions must be non-negative, got {self.width}x{self.height}"
            )
        expected = (self.height, self.width, CHANNELS)
        if self.pixels.dtype != np.uint8 or self.pixels.shape != expected:
            raise RasterContractError(
                f"Expected uint8 pixels shaped {expected}, got "
                f"{self.pixels.dtype} {self.pixels.shape}"
            )
        self.pixels.flags.writeable = False

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes | bytearray | memoryview) -> "RasterBuffer":
        """Wrap the contiguous RGBA *data* decoded by the image source."""

        width = int(width)
        height = int(height)
        if width < 0 or height < 0:
            raise RasterContractError(
                f"Raster dimensions must be non-negative, got {width}x{height}"
            )
        expected = width * height * CHANNELS
        if len(data) != expected:
            raise RasterContractError(
                f"Expected {expected} bytes for a {width}x{height} RGBA raster, got {len(data)}"
            )
        array = np.frombuffer(bytes(data), dtype=np.uint8).reshape((height, width, CHANNELS))
        return cls(width, height, array.copy())

    @classmethod
    def from_array(cls, pixels: np.ndarray) -> "RasterBuffer":
        """Return a raster owning a copy of the ``(H, W, 4)`` array *pixels*."""

        array = np.ascontiguousarray(pixels, dtype=np.uint8).copy()
        if array.ndim != 3 or array.shape[2] != CHANNELS:
            raise RasterContractError(f"Expected an (H, W, 4) array, got shape {array.shape}")
        return cls(int(array.shape[1]), int(array.shape[0]), array)

    @classmethod
    def blank(cls, width: int, height: int) -> "RasterBuffer":
        return cls(width, height, np.zeros((height, width, CHANNELS), dtype=np.uint8))

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()

    def writable_copy(self) -> np.ndarray:
        """Return a detached, writable copy of the pixel array."""

        return np.array(self.pixels, dtype=np.uint8, copy=True)


__all__ = ["CHANNELS", "RasterBuffer"]
