"""Synthetic images for demos and round-trip checks."""

import numpy as np

from models.color_space import ColorSpace
from models.image import Image, ImageByte


def generate_gradient(width: int = 256, height: int = 256) -> ImageByte:
    """Smooth diagonal RGB gradient - compresses with little error."""
    rows = np.arange(height, dtype=np.float32)[:, np.newaxis]
    cols = np.arange(width, dtype=np.float32)[np.newaxis, :]
    t = (rows + cols) / max(width + height - 2, 1)

    img = np.zeros((height, width, 3), dtype=np.float32)
    img[:, :, 0] = 40 + t * 180
    img[:, :, 1] = 60 + t * 140
    img[:, :, 2] = 120 + t * 100
    return ImageByte.from_array(np.clip(img, 0, 255).astype(np.uint8), ColorSpace.RGB)


def generate_colored_checkerboard(size: int = 256, block_size: int = 32) -> ImageByte:
    """High-contrast RGB checkerboard."""
    img = np.zeros((size, size, 3), dtype=np.uint8)

    for i in range(0, size, block_size):
        for j in range(0, size, block_size):
            if (i // block_size + j // block_size) % 2 == 0:
                img[i:i+block_size, j:j+block_size] = [30, 30, 30]
            else:
                img[i:i+block_size, j:j+block_size] = [220, 220, 220]

    return ImageByte.from_array(img, ColorSpace.RGB)


def generate_constant(
    width: int,
    height: int,
    value,
    color_space: ColorSpace = ColorSpace.GRAYSCALE,
    image_type: type = ImageByte
) -> Image:
    """Every sample of every channel set to ``value``."""
    image = image_type(width, height, color_space)
    image.pixels()[...] = value
    return image
