"""Scanline-sequential JPEG codec on top of OpenCV.

The decompressor hands out one decoded row per ``read_scanline`` call and
the compressor accepts one row per ``write_scanline`` call, so callers
never see compressed bytes.
"""

import logging
from dataclasses import dataclass
from enum import Enum

import cv2
import numpy as np

from models.errors import CodecError, ColorRepresentationUnsupportedError, ResourceUnavailableError
from models.save_params import SaveParams

logger = logging.getLogger(__name__)

JPEG_SOI = b'\xff\xd8'


class JpegColor(Enum):
    """Codec-native color representations."""

    GRAYSCALE = 'grayscale'
    RGB = 'rgb'
    EXT_RGBA = 'ext_rgba'
    YCBCR = 'ycbcr'
    CMYK = 'cmyk'
    YCCK = 'ycck'


# Components per input row accepted by the compressor.
ENCODABLE_COMPONENTS = {
    JpegColor.GRAYSCALE: 1,
    JpegColor.RGB: 3,
    JpegColor.EXT_RGBA: 4,
}


@dataclass(frozen=True)
class JpegHeader:
    """Header metadata reported before any scanline is read."""

    width: int
    height: int
    color: JpegColor


class JpegDecompressor:
    """Decoding session. Use ``open`` and close it (or use ``with``)."""

    def __init__(self, path, stream):
        self.path = path
        self._stream = stream
        self._rows = None
        self.output_scanline = 0

    @classmethod
    def open(cls, path) -> "JpegDecompressor":
        try:
            stream = open(path, 'rb')
        except OSError as e:
            raise ResourceUnavailableError(f"Could not open {path} for reading: {e}") from e
        logger.debug("Opened %s for decompression", path)
        return cls(path, stream)

    def read_header(self) -> JpegHeader:
        """Parse the bitstream and report its dimensions and color representation."""
        if self._stream is None:
            raise CodecError("Decompressor is closed")

        try:
            encoded = np.frombuffer(self._stream.read(), dtype=np.uint8)
        except OSError as e:
            raise ResourceUnavailableError(f"Could not read {self.path}: {e}") from e
        if encoded[:2].tobytes() != JPEG_SOI:
            raise CodecError(f"{self.path} is not a JPEG bitstream")
        try:
            decoded = cv2.imdecode(encoded, cv2.IMREAD_UNCHANGED)
        except cv2.error as e:
            raise CodecError(f"Could not decode {self.path}: {e}") from e
        if decoded is None or decoded.dtype != np.uint8:
            raise CodecError(f"Could not decode {self.path}")

        if decoded.ndim == 2:
            color = JpegColor.GRAYSCALE
        elif decoded.shape[2] == 3:
            decoded = cv2.cvtColor(decoded, cv2.COLOR_BGR2RGB)
            color = JpegColor.RGB
        else:
            color = JpegColor.CMYK

        height, width = decoded.shape[:2]
        self._rows = decoded.reshape(height, -1)
        self.output_scanline = 0
        return JpegHeader(width=width, height=height, color=color)

    @property
    def image_height(self) -> int:
        return 0 if self._rows is None else self._rows.shape[0]

    def read_scanline(self, destination: np.ndarray) -> None:
        """Copy the next row into ``destination`` (at most one row of samples)."""
        if self._rows is None:
            raise CodecError("Header has not been read")
        if self.output_scanline >= self._rows.shape[0]:
            raise CodecError("All scanlines have already been read")

        row = self._rows[self.output_scanline]
        destination[:row.size] = row
        self.output_scanline += 1

    def close(self) -> None:
        self._rows = None
        if self._stream is not None:
            stream, self._stream = self._stream, None
            try:
                stream.close()
            except OSError as e:
                raise ResourceUnavailableError(f"Could not close {self.path}: {e}") from e
            logger.debug("Closed decompressor for %s", self.path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class JpegCompressor:
    """Encoding session. Rows are staged, then encoded by ``finish``."""

    def __init__(self, path, stream):
        self.path = path
        self._stream = stream
        self._rows = None
        self._width = 0
        self._components = 0
        self._color = None
        self._params = None
        self.next_scanline = 0

    @classmethod
    def open(cls, path) -> "JpegCompressor":
        try:
            stream = open(path, 'wb')
        except OSError as e:
            raise ResourceUnavailableError(f"Could not open {path} for writing: {e}") from e
        logger.debug("Opened %s for compression", path)
        return cls(path, stream)

    def configure(
        self,
        width: int,
        height: int,
        components: int,
        color: JpegColor,
        params: SaveParams
    ) -> None:
        if color not in ENCODABLE_COMPONENTS:
            raise ColorRepresentationUnsupportedError(f"Cannot encode {color.name} input")
        if components != ENCODABLE_COMPONENTS[color]:
            raise CodecError(
                f"{color.name} input needs {ENCODABLE_COMPONENTS[color]} components, got {components}"
            )

        self._rows = np.zeros((height, width * components), dtype=np.uint8)
        self._width = width
        self._components = components
        self._color = color
        self._params = params
        self.next_scanline = 0

    @property
    def image_height(self) -> int:
        return 0 if self._rows is None else self._rows.shape[0]

    def write_scanline(self, source: np.ndarray) -> None:
        """Stage one row; only the first ``width * components`` samples are read."""
        if self._rows is None:
            raise CodecError("Compressor has not been configured")
        if self.next_scanline >= self._rows.shape[0]:
            raise CodecError("All scanlines have already been written")

        self._rows[self.next_scanline] = source[:self._rows.shape[1]]
        self.next_scanline += 1

    def finish(self) -> None:
        """Encode the staged rows and write the bitstream."""
        if self._rows is None or self._stream is None:
            raise CodecError("Compressor is not ready")
        if self.next_scanline < self.image_height:
            raise CodecError(f"Only {self.next_scanline} of {self.image_height} scanlines written")

        height = self._rows.shape[0]
        flags = [
            cv2.IMWRITE_JPEG_QUALITY, self._params.quality,
            cv2.IMWRITE_JPEG_PROGRESSIVE, int(self._params.progressive),
            cv2.IMWRITE_JPEG_OPTIMIZE, int(self._params.optimize),
        ]
        try:
            if self._color is JpegColor.GRAYSCALE:
                pixels = self._rows.reshape(height, self._width)
            else:
                pixels = self._rows.reshape(height, self._width, self._components)
                # The bitstream has no alpha channel.
                conversion = cv2.COLOR_RGBA2BGR if self._color is JpegColor.EXT_RGBA else cv2.COLOR_RGB2BGR
                pixels = cv2.cvtColor(pixels, conversion)
            ok, encoded = cv2.imencode('.jpg', pixels, flags)
        except cv2.error as e:
            raise CodecError(f"Could not encode {self.path}: {e}") from e
        if not ok:
            raise CodecError(f"Could not encode {self.path}")

        try:
            self._stream.write(encoded.tobytes())
            self._stream.flush()
        except OSError as e:
            raise ResourceUnavailableError(f"Could not write {self.path}: {e}") from e

    def close(self) -> None:
        self._rows = None
        if self._stream is not None:
            stream, self._stream = self._stream, None
            try:
                stream.close()
            except OSError as e:
                raise ResourceUnavailableError(f"Could not close {self.path}: {e}") from e
            logger.debug("Closed compressor for %s", self.path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
