"""Supported color spaces and the channel count each implies."""

from enum import Enum


class ColorSpace(Enum):
    """Color space of an image."""

    UNKNOWN = 0
    GRAYSCALE = 1
    RGB = 2
    RGBA = 3

    @property
    def channels(self) -> int:
        return channels_of(self)


_CHANNELS = {
    ColorSpace.GRAYSCALE: 1,
    ColorSpace.RGB: 3,
    ColorSpace.RGBA: 4,
}


def channels_of(color_space: ColorSpace) -> int:
    """Number of channels per pixel for a color space (0 for UNKNOWN)."""
    return _CHANNELS.get(color_space, 0)
