"""Decode image files into :class:`RasterBuffer` instances."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from ..core.raster import RasterBuffer
from ..errors import RasterContractError

LOGGER = logging.getLogger(__name__)


def raster_from_image(image: Image.Image) -> RasterBuffer:
    """Convert an in-memory Pillow *image* into an RGBA raster."""

    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return RasterBuffer.from_array(np.asarray(image, dtype=np.uint8))


def load_raster(path: Path) -> RasterBuffer:
    """Decode the file at *path* into an RGBA raster.

    EXIF orientation is applied so the raster matches what viewers show.
    Unreadable files raise :class:`RasterContractError`.
    """

    path = Path(path)
    try:
        with Image.open(path) as handle:
            handle.load()
            image = ImageOps.exif_transpose(handle)
            raster = raster_from_image(image)
    except FileNotFoundError as exc:
        raise RasterContractError(f"Image file not found: {path}") from exc
    except (UnidentifiedImageError, OSError) as exc:
        raise RasterContractError(f"Unable to decode image {path}: {exc}") from exc

    LOGGER.info("Loaded %s (%dx%d)", path.name, raster.width, raster.height)
    return raster


__all__ = ["load_raster", "raster_from_image"]
