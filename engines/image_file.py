"""Load and save image files.

The format is resolved from the path, then a scanline codec is driven row by
row against the image buffer. Failures are reported through the boolean
result and never raised to the caller.
"""

import logging
import os
from enum import Enum

import numpy as np

from engines.jpeg_codec import JpegColor, JpegCompressor, JpegDecompressor
from models.color_space import ColorSpace
from models.errors import (
    ColorRepresentationUnsupportedError,
    FormatUnrecognizedError,
    ImageError,
)
from models.image import Image
from models.save_params import SaveParams

logger = logging.getLogger(__name__)

# Codec-reported representations accepted on load. No color-model conversion
# is performed, so anything missing here is rejected.
JPEG_TO_COLOR_SPACE = {
    JpegColor.GRAYSCALE: ColorSpace.GRAYSCALE,
    JpegColor.RGB: ColorSpace.RGB,
    JpegColor.EXT_RGBA: ColorSpace.RGBA,
}

COLOR_SPACE_TO_JPEG = {
    ColorSpace.GRAYSCALE: JpegColor.GRAYSCALE,
    ColorSpace.RGB: JpegColor.RGB,
    ColorSpace.RGBA: JpegColor.EXT_RGBA,
}


class Format(Enum):
    UNKNOWN = 0
    JPEG = 1


class ImageFile:
    """Entry points for reading and writing image files."""

    @staticmethod
    def resolve_format(path) -> Format:
        """Any non-empty path is treated as JPEG; anything else is UNKNOWN."""
        if not isinstance(path, (str, bytes, os.PathLike)) or not os.fspath(path):
            return Format.UNKNOWN
        return Format.JPEG

    @classmethod
    def load(cls, path, image: Image) -> bool:
        """
        Load a file into ``image``, (re)creating it to match the file.

        Returns False when the format is unknown, the file cannot be opened
        or decoded, or the codec reports an unsupported color
        representation. ``image`` is untouched when the format is unknown;
        otherwise it may be left in an intermediate state on failure.
        """
        try:
            if cls.resolve_format(path) is not Format.JPEG:
                raise FormatUnrecognizedError(f"Unrecognized image format: {path!r}")
            cls._load_jpeg(path, image)
        except ImageError as e:
            logger.warning("Failed to load %s: %s", path, e)
            return False
        return True

    @classmethod
    def save(cls, path, image: Image, params: SaveParams = None) -> bool:
        """
        Save ``image`` to a file. Default parameters use maximal quality.

        Returns False on failure. A save that fails after the file was
        opened may leave a truncated file behind.
        """
        if params is None:
            params = SaveParams()
        try:
            if cls.resolve_format(path) is not Format.JPEG:
                raise FormatUnrecognizedError(f"Unrecognized image format: {path!r}")
            cls._save_jpeg(path, image, params)
        except ImageError as e:
            logger.warning("Failed to save %s: %s", path, e)
            return False
        return True

    @staticmethod
    def _load_jpeg(path, image: Image) -> None:
        if image.dtype != np.uint8:
            raise ColorRepresentationUnsupportedError(
                f"JPEG holds 8-bit channels, cannot load into {image.dtype} image"
            )

        with JpegDecompressor.open(path) as decompressor:
            header = decompressor.read_header()

            color_space = JPEG_TO_COLOR_SPACE.get(header.color)
            if color_space is None:
                raise ColorRepresentationUnsupportedError(
                    f"Unsupported color representation {header.color.name}"
                )

            image.create(header.width, header.height, color_space)
            for row in range(image.height):
                decompressor.read_scanline(image.scanline(row))

        logger.debug("Loaded %s as %r", path, image)

    @staticmethod
    def _save_jpeg(path, image: Image, params: SaveParams) -> None:
        if image.dtype != np.uint8:
            raise ColorRepresentationUnsupportedError(
                f"JPEG holds 8-bit channels, cannot save {image.dtype} image"
            )

        with JpegCompressor.open(path) as compressor:
            color = COLOR_SPACE_TO_JPEG.get(image.color_space)
            if color is None:
                raise ColorRepresentationUnsupportedError(
                    f"Color space {image.color_space.name} has no JPEG representation"
                )

            compressor.configure(image.width, image.height, image.channels, color, params)
            for row in range(image.height):
                compressor.write_scanline(image.scanline(row))
            compressor.finish()

        logger.debug("Saved %r to %s (quality %d)", image, path, params.quality)
