"""Row-padded pixel buffer.

The origin of the coordinate system is the top-left corner::

    (0,0)* ---------------------> column
         | XXXXXXXXXXXXXXXXXX p
         | XXXXXXXXXXXXXXXXXX p
         | XXXXXXXXXXXXXXXXXX p
         v
        row

    X = channel samples of one pixel
    p = padding (0 or more bytes so every row starts on a 32-bit boundary)

Padding bytes hold no pixel data and are never read as channel values.
"""

from typing import Optional

import numpy as np

from models.color_space import ColorSpace, channels_of

CHANNEL_TYPES = (np.dtype(np.uint8), np.dtype(np.float32), np.dtype(np.float64))


def calculate_bpp(color_space: ColorSpace, dtype) -> int:
    """Bits per pixel for a color space and a channel sample type."""
    return channels_of(color_space) * np.dtype(dtype).itemsize * 8


def calculate_row_size(width: int, bpp: int) -> int:
    """Length of a scanline in bytes, padding included (32-bit aligned)."""
    return ((width * bpp + 31) & ~31) >> 3


class Image:
    """
    Contiguous pixel buffer whose rows are padded to 4-byte multiples.

    The buffer owns a single zero-initialised byte array of
    ``row_stride * height`` bytes, reinterpreted as samples of the channel
    type (uint8, float32 or float64). Every other component consults
    ``row_stride`` instead of recomputing the layout.
    """

    channel_type = None

    def __init__(
        self,
        width: int = 0,
        height: int = 0,
        color_space: ColorSpace = ColorSpace.GRAYSCALE,
        data=None,
        dtype=None
    ):
        if dtype is None:
            dtype = self.channel_type or np.uint8
        dtype = np.dtype(dtype)
        if dtype not in CHANNEL_TYPES:
            raise TypeError(f"Invalid type for color channel: {dtype}")
        self._dtype = dtype
        self.destroy()

        if width or height:
            self.create(width, height, color_space, data)

    @classmethod
    def from_array(cls, array: np.ndarray, color_space: Optional[ColorSpace] = None, dtype=None) -> "Image":
        """Build a padded buffer from a (H, W) or (H, W, C) array. Values are cast."""
        array = np.asarray(array)
        if array.ndim == 2:
            array = array[:, :, np.newaxis]
        if array.ndim != 3:
            raise ValueError(f"Expected a 2D or 3D array, got shape {array.shape}")

        if color_space is None:
            by_channels = {channels_of(cs): cs for cs in ColorSpace if cs is not ColorSpace.UNKNOWN}
            color_space = by_channels.get(array.shape[2])
            if color_space is None:
                raise ValueError(f"No color space has {array.shape[2]} channels")
        elif channels_of(color_space) != array.shape[2]:
            raise ValueError(
                f"{color_space.name} needs {channels_of(color_space)} channels, got {array.shape[2]}"
            )

        if dtype is None:
            dtype = cls.channel_type or array.dtype
        image = cls(dtype=dtype)
        image.create(array.shape[1], array.shape[0], color_space)
        image.pixels()[...] = array
        return image

    def destroy(self) -> None:
        """Release the buffer and reset every attribute to the empty state."""
        self._color_space = ColorSpace.UNKNOWN
        self._bpp = 0
        self._width = 0
        self._height = 0
        self._row_size = 0
        self._channels = 0
        self._buffer = None
        self._data = None

    def create(self, width: int, height: int, color_space: ColorSpace, data=None) -> None:
        """
        Allocate a new buffer. All previous data is released.

        ``data`` is any buffer-protocol object whose first
        ``row_stride * height`` bytes already follow this layout; it is
        copied verbatim and not validated.
        """
        width, height = int(width), int(height)
        if width < 0 or height < 0:
            raise ValueError(f"Image dimensions must be non-negative, got {width}x{height}")

        self.destroy()

        self._color_space = color_space
        self._bpp = calculate_bpp(color_space, self._dtype)
        self._width = width
        self._height = height
        self._row_size = calculate_row_size(width, self._bpp)
        self._channels = channels_of(color_space)

        self._buffer = np.zeros(self._row_size * height, dtype=np.uint8)
        if data is not None and self._buffer.size:
            self._buffer[:] = np.frombuffer(data, dtype=np.uint8, count=self._buffer.size)
        self._data = self._buffer.view(self._dtype)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def row_stride(self) -> int:
        """Length of a scanline in bytes, padding included."""
        return self._row_size

    @property
    def color_space(self) -> ColorSpace:
        return self._color_space

    @property
    def channels(self) -> int:
        return self._channels

    @property
    def bits_per_pixel(self) -> int:
        return self._bpp

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def nbytes(self) -> int:
        return 0 if self._buffer is None else self._buffer.size

    @property
    def is_empty(self) -> bool:
        return self._data is None

    @property
    def data(self) -> Optional[np.ndarray]:
        """Flat sample array, rows padded. None when the image is empty."""
        return self._data

    def at(self, row: int, column: int) -> int:
        """
        Offset, in samples, of the first channel of pixel (row, column).

        Unchecked: the caller guarantees ``row < height`` and
        ``column < width``.
        """
        return row * (self._row_size // self._dtype.itemsize) + column * self._channels

    def checked_at(self, row: int, column: int) -> int:
        """Same as ``at`` but raises IndexError outside the image."""
        if not (0 <= row < self._height and 0 <= column < self._width):
            raise IndexError(
                f"Pixel ({row}, {column}) outside {self._width}x{self._height} image"
            )
        return self.at(row, column)

    def pixel(self, row: int, column: int) -> np.ndarray:
        """Writable view of the channels of one pixel."""
        offset = self.checked_at(row, column)
        return self._data[offset:offset + self._channels]

    def scanline(self, row: int) -> np.ndarray:
        """Writable view of one row's samples, padding excluded."""
        if not (0 <= row < self._height):
            raise IndexError(f"Row {row} outside image of height {self._height}")
        offset = self.at(row, 0)
        return self._data[offset:offset + self._width * self._channels]

    def pixels(self) -> np.ndarray:
        """Writable (height, width, channels) view, padding excluded."""
        if self._data is None:
            return np.empty((0, 0, 0), dtype=self._dtype)
        row_samples = self._row_size // self._dtype.itemsize
        rows = self._data.reshape(self._height, row_samples)
        return rows[:, :self._width * self._channels].reshape(
            self._height, self._width, self._channels
        )

    def to_array(self) -> np.ndarray:
        """Dense copy of the pixels as a (height, width, channels) array."""
        return self.pixels().copy()

    def copy(self) -> "Image":
        """Deep copy with identical layout."""
        image = type(self)(dtype=self._dtype)
        if not self.is_empty:
            image.create(self._width, self._height, self._color_space, self._buffer)
        return image

    def __copy__(self) -> "Image":
        return self.copy()

    def __deepcopy__(self, memo) -> "Image":
        return self.copy()

    def assign(self, image: "Image") -> "Image":
        """
        Copy ``image`` into this buffer.

        The current allocation is reused when both buffers have the same
        byte size; otherwise it is replaced.
        """
        if image._dtype != self._dtype:
            raise TypeError(f"Cannot assign {image._dtype} image to {self._dtype} image")
        if image is self:
            return self
        if image.is_empty:
            self.destroy()
            return self

        if self._buffer is None or self._buffer.size != image._buffer.size:
            self._buffer = np.empty(image._buffer.size, dtype=np.uint8)
        np.copyto(self._buffer, image._buffer)

        self._color_space = image._color_space
        self._bpp = image._bpp
        self._width = image._width
        self._height = image._height
        self._row_size = image._row_size
        self._channels = image._channels
        self._data = self._buffer.view(self._dtype)
        return self

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self._width}x{self._height}, "
            f"{self._color_space.name}, {self._dtype})"
        )


class ImageByte(Image):
    """8-bit unsigned channels."""

    channel_type = np.uint8


class ImageFloat(Image):
    """32-bit float channels."""

    channel_type = np.float32


class ImageDouble(Image):
    """64-bit float channels."""

    channel_type = np.float64
