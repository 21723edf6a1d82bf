"""Encode final rasters and write them to disk."""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image

from ..config import EXPORT_FORMATS
from ..core.raster import RasterBuffer
from ..errors import ExportError
from ..utils.jsonio import atomic_write_bytes

LOGGER = logging.getLogger(__name__)

DEFAULT_EXPORT_NAME = "aligned-fusion-ready.png"
"""File name used when the export destination is a directory."""

_FORMAT_SUFFIXES = {"PNG": ".png", "TIFF": ".tiff", "WEBP": ".webp"}


def encode_raster(raster: RasterBuffer, fmt: str = "PNG") -> bytes:
    """Return *raster* encoded in the lossless format *fmt*."""

    fmt = fmt.upper()
    if fmt not in EXPORT_FORMATS:
        raise ExportError(f"Unsupported export format: {fmt}")
    if raster.is_empty:
        raise ExportError("Cannot encode an empty raster")

    image = Image.frombuffer(
        "RGBA", (raster.width, raster.height), raster.to_bytes(), "raw", "RGBA", 0, 1
    )
    # ``exact`` keeps the colour of fully transparent pixels.
    options = {"lossless": True, "exact": True} if fmt == "WEBP" else {}
    buffer = io.BytesIO()
    try:
        image.save(buffer, format=fmt, **options)
    except (OSError, ValueError) as exc:
        raise ExportError(f"Failed to encode raster as {fmt}: {exc}") from exc
    return buffer.getvalue()


def resolve_export_path(destination: Path, default_fmt: str = "PNG") -> Path:
    """Return the file written for *destination*.

    A directory receives :data:`DEFAULT_EXPORT_NAME` with the suffix of
    *default_fmt*; any other path is returned unchanged.
    """

    destination = Path(destination)
    if not destination.is_dir():
        return destination
    suffix = _FORMAT_SUFFIXES.get(default_fmt.upper())
    if suffix is None:
        raise ExportError(f"Unsupported export format: {default_fmt}")
    return destination / Path(DEFAULT_EXPORT_NAME).with_suffix(suffix)


def save_raster(
    raster: RasterBuffer,
    path: Path,
    fmt: str | None = None,
    *,
    default_fmt: str = "PNG",
) -> Path:
    """Encode *raster* and atomically write it to *path*.

    Without an explicit *fmt* the format follows the file suffix, and
    *default_fmt* is used when the suffix names no lossless export format.
    """

    path = resolve_export_path(path, default_fmt)
    if fmt is None:
        fmt = Image.registered_extensions().get(path.suffix.lower(), "")
        if fmt not in EXPORT_FORMATS:
            LOGGER.debug("Suffix %r is not an export format, writing %s", path.suffix, default_fmt)
            fmt = default_fmt
    payload = encode_raster(raster, fmt)
    try:
        atomic_write_bytes(path, payload)
    except OSError as exc:
        raise ExportError(f"Failed to write {path}: {exc}") from exc
    LOGGER.info("Exported %dx%d raster to %s", raster.width, raster.height, path)
    return path


__all__ = ["DEFAULT_EXPORT_NAME", "encode_raster", "resolve_export_path", "save_raster"]
