"""Pixel-wise arithmetic on images."""

from numbers import Number
from typing import Callable, Sequence, Union

import numpy as np

from models.color_space import ColorSpace
from models.errors import IncompatibleImagesError
from models.image import Image

# ITU-R BT.709 luma weights
LUMA_R = 0.2126
LUMA_G = 0.7152
LUMA_B = 0.0722


def _widen(samples: np.ndarray) -> np.ndarray:
    """Promote 8-bit samples so intermediate results cannot wrap."""
    if samples.dtype == np.uint8:
        return samples.astype(np.float64)
    return samples


def _saturate(values: np.ndarray, dtype: np.dtype) -> np.ndarray:
    """Round and clamp to [0, 255] for 8-bit channels; floats pass through."""
    if dtype == np.uint8:
        return np.clip(np.rint(values), 0, 255).astype(np.uint8)
    with np.errstate(over='ignore', invalid='ignore'):
        return np.asarray(values).astype(dtype)


class ImageOperator:
    """
    Element-wise operations over every channel of every pixel.

    Padding is never processed. Two-image operations require operands of
    equal width, height and color space and raise IncompatibleImagesError
    otherwise, before the output is touched. An output that is not
    compatible with the inputs is recreated to match them.
    """

    @staticmethod
    def are_compatible(image_a: Image, image_b: Image) -> bool:
        """True if both images have the same dimensions and color space."""
        return (
            image_a.width == image_b.width
            and image_a.height == image_b.height
            and image_a.color_space == image_b.color_space
        )

    @classmethod
    def add(cls, output: Image, image_a: Image, image_b: Image) -> None:
        """output = image_a + image_b. ``output`` may be one of the inputs."""
        cls._combine(output, (image_a, image_b), np.add)

    @classmethod
    def subtract(cls, output: Image, image_a: Image, image_b: Image) -> None:
        """output = image_a - image_b. ``output`` may be one of the inputs."""
        cls._combine(output, (image_a, image_b), np.subtract)

    @classmethod
    def multiply(cls, output: Image, image: Image, operand: Union[Image, Number]) -> None:
        """
        Multiply by a scalar or, pixel by pixel, by another image.

        With a scalar, ``output`` may be ``image``. With an image operand,
        ``output`` must be distinct from both inputs; this is not checked.
        The current implementation happens to compute the full product before
        writing, but aliased output is not part of the contract.
        """
        if isinstance(operand, Image):
            cls._combine(output, (image, operand), np.multiply)
        else:
            cls._combine(output, (image,), lambda samples: samples * operand)

    @classmethod
    def luminance(cls, output: Image, image: Image) -> None:
        """
        Grayscale from RGB: g = 0.2126*R + 0.7152*G + 0.0722*B.

        ``output`` is recreated as GRAYSCALE when it has no channels or its
        dimensions differ from ``image``. Otherwise only its first channel is
        written and any other channels keep their previous values.
        """
        cls._check_channel_types(output, image)
        if image.channels != 3:
            raise IncompatibleImagesError(
                f"Luminance needs an RGB image, got {image.color_space.name}"
            )

        rgb = _widen(image.pixels())
        gray = LUMA_R * rgb[..., 0] + LUMA_G * rgb[..., 1] + LUMA_B * rgb[..., 2]

        if (
            output.channels == 0
            or output.width != image.width
            or output.height != image.height
        ):
            output.create(image.width, image.height, ColorSpace.GRAYSCALE)
        output.pixels()[..., 0] = _saturate(gray, output.dtype)

    @staticmethod
    def _check_channel_types(*images: Image) -> None:
        dtypes = {image.dtype for image in images}
        if len(dtypes) > 1:
            raise TypeError(f"Images have different channel types: {sorted(map(str, dtypes))}")

    @classmethod
    def _combine(cls, output: Image, operands: Sequence[Image], func: Callable) -> None:
        """
        Apply ``func`` sample-wise to the operands and store it in ``output``.

        The result is computed in full before ``output`` is written.
        """
        cls._check_channel_types(output, *operands)
        first = operands[0]
        for other in operands[1:]:
            if not cls.are_compatible(first, other):
                raise IncompatibleImagesError(f"Incompatible operands: {first!r} and {other!r}")

        with np.errstate(over='ignore', invalid='ignore'):
            result = func(*(_widen(operand.pixels()) for operand in operands))

        if not cls.are_compatible(output, first) or output.is_empty != first.is_empty:
            output.create(first.width, first.height, first.color_space)
        output.pixels()[...] = _saturate(result, output.dtype)
