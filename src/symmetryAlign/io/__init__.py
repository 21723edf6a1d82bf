"""Image source and output sink adapters."""

from __future__ import annotations

from .image_source import load_raster, raster_from_image
from .output_sink import DEFAULT_EXPORT_NAME, encode_raster, resolve_export_path, save_raster

__all__ = [
    "DEFAULT_EXPORT_NAME",
    "encode_raster",
    "load_raster",
    "raster_from_image",
    "resolve_export_path",
    "save_raster",
]
