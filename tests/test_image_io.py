"""Tests for the raster contract, image source and output sink."""

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from src.symmetryAlign.core.raster import RasterBuffer
from src.symmetryAlign.errors import ExportError, RasterContractError, SymmetryAlignError
from src.symmetryAlign.io import (
    DEFAULT_EXPORT_NAME,
    encode_raster,
    load_raster,
    raster_from_image,
    save_raster,
)


@pytest.fixture
def raster():
    rng = np.random.default_rng(21)
    return RasterBuffer.from_array(rng.integers(0, 256, size=(12, 20, 4), dtype=np.uint8))


def test_from_bytes_wraps_rgba_data():
    data = bytes(range(2 * 3 * 4))
    raster = RasterBuffer.from_bytes(2, 3, data)
    assert (raster.width, raster.height) == (2, 3)
    assert raster.pixels[0, 1].tolist() == [4, 5, 6, 7]
    assert raster.to_bytes() == data
    assert raster.pixel_count == 6


def test_from_bytes_rejects_wrong_length():
    with pytest.raises(RasterContractError):
        RasterBuffer.from_bytes(2, 2, b"\x00" * 15)


def test_negative_dimensions_are_a_contract_violation():
    with pytest.raises(RasterContractError):
        RasterBuffer.from_bytes(-1, 2, b"")
    with pytest.raises(ValueError):
        RasterBuffer(2, 2, np.zeros((2, 2, 3), dtype=np.uint8))


def test_pixels_are_read_only(raster):
    with pytest.raises(ValueError):
        raster.pixels[0, 0, 0] = 1
    copy = raster.writable_copy()
    copy[0, 0, 0] = 1
    assert copy.flags.writeable


def test_from_array_copies_input():
    source = np.zeros((2, 2, 4), dtype=np.uint8)
    raster = RasterBuffer.from_array(source)
    source[0, 0, 0] = 99
    assert raster.pixels[0, 0, 0] == 0


def test_rgb_image_gains_opaque_alpha():
    image = Image.new("RGB", (3, 2), (10, 20, 30))
    raster = raster_from_image(image)
    assert raster.pixels.shape == (2, 3, 4)
    assert raster.pixels[1, 2].tolist() == [10, 20, 30, 255]


@pytest.mark.parametrize("suffix", [".png", ".tiff", ".webp"])
def test_save_and_load_round_trip(tmp_path: Path, raster, suffix):
    target = save_raster(raster, tmp_path / f"export{suffix}")
    assert target.exists()
    assert not target.with_suffix(suffix + ".tmp").exists()
    loaded = load_raster(target)
    assert np.array_equal(loaded.pixels, raster.pixels)


def test_explicit_format_overrides_suffix(tmp_path: Path, raster):
    target = save_raster(raster, tmp_path / "export.bin", "png")
    with Image.open(target) as handle:
        assert handle.format == "PNG"


def test_unknown_suffix_uses_default_format(tmp_path: Path, raster):
    target = save_raster(raster, tmp_path / "export.jpg", default_fmt="TIFF")
    assert target == tmp_path / "export.jpg"
    with Image.open(target) as handle:
        assert handle.format == "TIFF"


def test_known_suffix_wins_over_default_format(tmp_path: Path, raster):
    target = save_raster(raster, tmp_path / "export.webp", default_fmt="TIFF")
    with Image.open(target) as handle:
        assert handle.format == "WEBP"


def test_directory_destination_gets_default_name(tmp_path: Path, raster):
    target = save_raster(raster, tmp_path, default_fmt="webp")
    assert target == tmp_path / "aligned-fusion-ready.webp"
    assert target.stem == DEFAULT_EXPORT_NAME.split(".")[0]
    with Image.open(target) as handle:
        assert handle.format == "WEBP"


def test_save_creates_parent_directories(tmp_path: Path, raster):
    target = save_raster(raster, tmp_path / "nested" / "out" / "export.png")
    assert target.exists()


def test_encode_rejects_lossy_format(raster):
    with pytest.raises(ExportError):
        encode_raster(raster, "JPEG")


def test_encode_rejects_empty_raster():
    with pytest.raises(ExportError):
        encode_raster(RasterBuffer.blank(0, 0))


def test_load_missing_file(tmp_path: Path):
    with pytest.raises(RasterContractError):
        load_raster(tmp_path / "missing.png")


def test_load_garbage_file(tmp_path: Path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"definitely not an image")
    with pytest.raises(SymmetryAlignError):
        load_raster(path)
