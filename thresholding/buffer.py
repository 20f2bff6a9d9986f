"""
Pixel buffer data model.

A PixelBuffer is the substrate every histogram and threshold function reads
and produces: a width, a height and a flat RGBA8 byte string. Buffers are
immutable; every transform returns a new instance so the caller can keep the
decoded original around and re-apply different transforms to it.
"""

from dataclasses import dataclass
from enum import IntEnum

import numpy as np


class Channel(IntEnum):
    """Color component of an RGBA8 pixel.

    The value is the byte offset of the component inside a pixel.
    """

    RED = 0
    GREEN = 1
    BLUE = 2
    ALPHA = 3


# Components that take part in histograms and thresholding (alpha never does)
COLOR_CHANNELS: tuple[Channel, ...] = (Channel.RED, Channel.GREEN, Channel.BLUE)

BYTES_PER_PIXEL = len(Channel)


@dataclass(frozen=True)
class PixelBuffer:
    """Immutable RGBA8 image.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        pixels: Row-major RGBA bytes, ``width * height * 4`` long.

    Raises:
        TypeError: If pixels is not bytes-like or a dimension is not an int.
        ValueError: If a dimension is negative or the length does not match.
    """

    width: int
    height: int
    pixels: bytes

    def __post_init__(self) -> None:
        for label, value in (("width", self.width), ("height", self.height)):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise TypeError(f"{label} must be int, got {type(value).__name__}")
            if value < 0:
                raise ValueError(f"{label} must be non-negative, got {value}")

        if not isinstance(self.pixels, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"pixels must be bytes, got {type(self.pixels).__name__}"
            )

        # Normalize to an immutable bytes object
        object.__setattr__(self, "width", int(self.width))
        object.__setattr__(self, "height", int(self.height))
        object.__setattr__(self, "pixels", bytes(self.pixels))

        expected = self.width * self.height * BYTES_PER_PIXEL
        if len(self.pixels) != expected:
            raise ValueError(
                f"pixel data has {len(self.pixels)} bytes, expected {expected} "
                f"for a {self.width}x{self.height} RGBA image"
            )

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Build a buffer from an (H, W, 4) uint8 array.

        The array is copied; later changes to it do not affect the buffer.

        Raises:
            TypeError: If array is not a numpy array.
            ValueError: If the shape or dtype is not RGBA8.
        """
        if not isinstance(array, np.ndarray):
            raise TypeError(f"Expected numpy.ndarray, got {type(array).__name__}")

        if array.ndim != 3 or array.shape[2] != BYTES_PER_PIXEL:
            raise ValueError(
                f"Expected an (H, W, 4) RGBA array, got shape {array.shape}"
            )

        if array.dtype != np.uint8:
            raise ValueError(f"Expected dtype uint8, got {array.dtype}")

        height, width = array.shape[:2]
        return cls(width=width, height=height, pixels=array.tobytes())

    def as_array(self) -> np.ndarray:
        """Return a read-only (H, W, 4) uint8 view of the pixel data."""
        if self.is_empty:
            empty = np.zeros((self.height, self.width, BYTES_PER_PIXEL), dtype=np.uint8)
            empty.flags.writeable = False
            return empty
        return np.frombuffer(self.pixels, dtype=np.uint8).reshape(
            self.height, self.width, BYTES_PER_PIXEL
        )

    def channel(self, channel: Channel) -> np.ndarray:
        """Return a read-only (H, W) view of one component."""
        return self.as_array()[:, :, Channel(channel)]

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.pixel_count == 0

    @property
    def dimensions(self) -> tuple[int, int]:
        """Get (width, height) of the image."""
        return self.width, self.height

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height})"
