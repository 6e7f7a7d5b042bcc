"""Tests for loading and saving image files."""

from pathlib import Path

import numpy as np
import pytest
from engines.image_file import Format, ImageFile
from engines.jpeg_codec import JpegColor, JpegCompressor, JpegDecompressor, JpegHeader
from models.color_space import ColorSpace
from models.image import ImageByte, ImageFloat
from models.save_params import SaveParams
from utils.metrics import compute_psnr, max_abs_error
from utils.test_images import generate_colored_checkerboard, generate_gradient

# Lossy tolerance for a quality-100 round trip of smooth content
MAX_ROUND_TRIP_ERROR = 10
MIN_ROUND_TRIP_PSNR = 40.0


def gray_gradient(width, height):
    values = (np.arange(width)[np.newaxis, :] + np.arange(height)[:, np.newaxis]) * 2
    return ImageByte.from_array(np.clip(values, 0, 255).astype(np.uint8))


def test_resolve_format():
    assert ImageFile.resolve_format("") is Format.UNKNOWN
    assert ImageFile.resolve_format("photo.jpg") is Format.JPEG
    assert ImageFile.resolve_format(Path("photo.jpeg")) is Format.JPEG


def test_load_unknown_format_leaves_image_untouched():
    image = ImageByte(3, 2, ColorSpace.RGB)
    image.pixels()[...] = 17
    before = image.data.copy()

    assert not ImageFile.load("", image)
    assert (image.width, image.height) == (3, 2)
    assert np.array_equal(image.data, before)


def test_save_unknown_format():
    assert not ImageFile.save("", generate_gradient(8, 8))


def test_load_missing_file(tmp_path):
    image = ImageByte()
    assert not ImageFile.load(tmp_path / "missing.jpg", image)


def test_load_rejects_non_jpeg_content(tmp_path):
    path = tmp_path / "fake.jpg"
    path.write_bytes(b"definitely not a jpeg")
    assert not ImageFile.load(path, ImageByte())


def test_save_to_missing_directory(tmp_path):
    assert not ImageFile.save(tmp_path / "nope" / "out.jpg", generate_gradient(8, 8))


def test_rgb_round_trip(tmp_path):
    """Structural fields survive exactly, samples within the lossy tolerance."""
    original = generate_gradient(64, 48)
    path = tmp_path / "gradient.jpg"
    assert ImageFile.save(path, original)

    loaded = ImageByte()
    assert ImageFile.load(path, loaded)
    assert (loaded.width, loaded.height) == (64, 48)
    assert loaded.color_space is ColorSpace.RGB
    assert loaded.row_stride == original.row_stride
    assert max_abs_error(original, loaded) <= MAX_ROUND_TRIP_ERROR
    assert compute_psnr(original, loaded) > MIN_ROUND_TRIP_PSNR


def test_grayscale_round_trip_keeps_padding_zero(tmp_path):
    """Odd widths have padded rows; the codec never writes the padding."""
    original = gray_gradient(37, 23)
    assert original.row_stride == 40
    path = tmp_path / "gray.jpg"
    assert ImageFile.save(str(path), original)

    loaded = ImageByte(5, 5, ColorSpace.RGBA)
    assert ImageFile.load(str(path), loaded)
    assert loaded.color_space is ColorSpace.GRAYSCALE
    assert (loaded.width, loaded.height, loaded.row_stride) == (37, 23, 40)
    assert np.all(loaded.data.reshape(23, 40)[:, 37:] == 0)
    assert max_abs_error(original, loaded) <= MAX_ROUND_TRIP_ERROR


def test_rgba_is_saved_without_alpha(tmp_path):
    rgb = generate_gradient(16, 16).to_array()
    rgba = np.concatenate([rgb, np.full((16, 16, 1), 128, dtype=np.uint8)], axis=2)
    path = tmp_path / "rgba.jpg"
    assert ImageFile.save(path, ImageByte.from_array(rgba))

    loaded = ImageByte()
    assert ImageFile.load(path, loaded)
    assert loaded.color_space is ColorSpace.RGB
    assert (loaded.width, loaded.height) == (16, 16)
    assert np.max(np.abs(loaded.to_array().astype(int) - rgb.astype(int))) <= MAX_ROUND_TRIP_ERROR


def test_lower_quality_gives_smaller_file(tmp_path):
    image = generate_colored_checkerboard(128, block_size=8)
    high = tmp_path / "high.jpg"
    low = tmp_path / "low.jpg"
    assert ImageFile.save(high, image)
    assert ImageFile.save(low, image, SaveParams(quality=10))
    assert low.stat().st_size < high.stat().st_size


def test_save_rejects_unknown_color_space(tmp_path):
    image = ImageByte(4, 4, ColorSpace.UNKNOWN)
    assert not ImageFile.save(tmp_path / "unknown.jpg", image)


def test_float_images_are_not_supported(tmp_path):
    path = tmp_path / "gradient.jpg"
    assert not ImageFile.save(path, ImageFloat(4, 4, ColorSpace.RGB))

    assert ImageFile.save(path, generate_gradient(4, 4))
    assert not ImageFile.load(path, ImageFloat())


def test_unsupported_codec_color_releases_session(tmp_path, monkeypatch):
    """A rejected color representation still closes the codec session."""
    path = tmp_path / "gradient.jpg"
    assert ImageFile.save(path, generate_gradient(8, 8))

    closed = []
    original_close = JpegDecompressor.close

    def fake_header(self):
        return JpegHeader(width=8, height=8, color=JpegColor.CMYK)

    def spy_close(self):
        closed.append(self.path)
        original_close(self)

    monkeypatch.setattr(JpegDecompressor, "read_header", fake_header)
    monkeypatch.setattr(JpegDecompressor, "close", spy_close)

    image = ImageByte()
    assert not ImageFile.load(path, image)
    assert closed == [path]
    assert image.is_empty


def test_load_reads_every_scanline_in_order(tmp_path, monkeypatch):
    path = tmp_path / "gray.jpg"
    assert ImageFile.save(path, gray_gradient(9, 6))

    rows = []
    original_read = JpegDecompressor.read_scanline

    def spy_read(self, destination):
        rows.append(self.output_scanline)
        assert destination.size == 9
        original_read(self, destination)

    monkeypatch.setattr(JpegDecompressor, "read_scanline", spy_read)
    assert ImageFile.load(path, ImageByte())
    assert rows == list(range(6))


class FailingStream:
    """File stand-in whose I/O fails like a full or broken device."""

    def __init__(self, fail_on):
        self.fail_on = fail_on
        self.closed = False

    def _maybe_fail(self, operation):
        if operation in self.fail_on:
            raise OSError(28, "No space left on device")

    def read(self):
        self._maybe_fail("read")
        return b""

    def write(self, data):
        self._maybe_fail("write")
        return len(data)

    def flush(self):
        self._maybe_fail("flush")

    def close(self):
        self.closed = True
        self._maybe_fail("close")


@pytest.mark.parametrize("fail_on", [{"write"}, {"flush"}, {"close"}])
def test_save_io_error_returns_false(tmp_path, monkeypatch, fail_on):
    """Write, flush or close errors are reported through the result."""
    stream = FailingStream(fail_on)
    monkeypatch.setattr(JpegCompressor, "open", classmethod(lambda cls, path: cls(path, stream)))

    assert ImageFile.save(tmp_path / "out.jpg", generate_gradient(16, 16)) is False
    assert stream.closed


def test_load_read_error_returns_false(tmp_path, monkeypatch):
    stream = FailingStream({"read"})
    monkeypatch.setattr(JpegDecompressor, "open", classmethod(lambda cls, path: cls(path, stream)))

    assert ImageFile.load(tmp_path / "in.jpg", ImageByte()) is False
    assert stream.closed


@pytest.mark.skipif(not Path("/dev/full").exists(), reason="needs /dev/full")
def test_save_to_full_device():
    assert ImageFile.save("/dev/full", generate_gradient(64, 64)) is False


@pytest.mark.parametrize("path", [None, 42, object()])
def test_non_path_values_are_unknown_format(path):
    """Anything that is not a path resolves to UNKNOWN and fails cleanly."""
    assert ImageFile.resolve_format(path) is Format.UNKNOWN

    image = ImageByte(2, 2, ColorSpace.RGB)
    assert ImageFile.load(path, image) is False
    assert (image.width, image.height) == (2, 2)
    assert ImageFile.save(path, image) is False
