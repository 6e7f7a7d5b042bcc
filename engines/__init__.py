"""Image engines - file I/O through the scanline codec and pixel arithmetic."""

from .jpeg_codec import JpegColor, JpegHeader, JpegDecompressor, JpegCompressor
from .image_file import Format, ImageFile
from .image_operator import ImageOperator

__all__ = [
    'JpegColor',
    'JpegHeader',
    'JpegDecompressor',
    'JpegCompressor',
    'Format',
    'ImageFile',
    'ImageOperator',
]
