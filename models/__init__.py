"""Data models: color spaces, pixel buffers, codec parameters and errors."""

from .color_space import ColorSpace, channels_of
from .image import Image, ImageByte, ImageFloat, ImageDouble, calculate_bpp, calculate_row_size
from .save_params import SaveParams
from .errors import (
    ImageError,
    FormatUnrecognizedError,
    ResourceUnavailableError,
    ColorRepresentationUnsupportedError,
    CodecError,
    IncompatibleImagesError,
)

__all__ = [
    'ColorSpace',
    'channels_of',
    'Image',
    'ImageByte',
    'ImageFloat',
    'ImageDouble',
    'calculate_bpp',
    'calculate_row_size',
    'SaveParams',
    'ImageError',
    'FormatUnrecognizedError',
    'ResourceUnavailableError',
    'ColorRepresentationUnsupportedError',
    'CodecError',
    'IncompatibleImagesError',
]
