"""Error taxonomy for image I/O and pixel operators."""


class ImageError(Exception):
    """Base class for all image errors."""


class FormatUnrecognizedError(ImageError):
    """The file format could not be resolved from the path."""


class ResourceUnavailableError(ImageError):
    """The file could not be opened for reading or writing."""


class ColorRepresentationUnsupportedError(ImageError):
    """The color representation has no counterpart on the other side."""


class CodecError(ImageError):
    """The codec could not decode or encode the bitstream."""


class IncompatibleImagesError(ImageError, ValueError):
    """Operands differ in width, height or color space."""
