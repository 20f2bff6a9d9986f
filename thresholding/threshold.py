"""Range thresholding: the binarization primitive every selector ends with."""

import numpy as np

from config import MAX_LEVEL

from .buffer import Channel, PixelBuffer


def _validate_level(label: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise TypeError(f"{label} must be int, got {type(value).__name__}")
    if not 0 <= value <= MAX_LEVEL:
        raise ValueError(f"{label} must be in [0, {MAX_LEVEL}], got {value}")
    return int(value)


def threshold(buf: PixelBuffer, low: int, high: int) -> PixelBuffer:
    """Binarize an image with an inclusive value range.

    A pixel becomes white (R=G=B=255) when ANY of its R, G or B values lies
    in ``[low, high]``, otherwise black (R=G=B=0). Alpha is copied from the
    input. With ``low > high`` no pixel qualifies and the result is black.

    Args:
        buf: Source image.
        low: Lower bound, 0-255.
        high: Upper bound, 0-255.

    Returns:
        New binarized PixelBuffer.

    Raises:
        TypeError: If a bound is not an integer.
        ValueError: If a bound is outside [0, 255].
    """
    low = _validate_level("low", low)
    high = _validate_level("high", high)

    source = buf.as_array()
    rgb = source[:, :, :3]
    inside = np.any((rgb >= low) & (rgb <= high), axis=2)

    result = np.empty_like(source)
    result[:, :, :3] = np.where(inside, MAX_LEVEL, 0).astype(np.uint8)[:, :, np.newaxis]
    result[:, :, Channel.ALPHA] = source[:, :, Channel.ALPHA]
    return PixelBuffer.from_array(result)


def white_fraction(buf: PixelBuffer) -> float:
    """Fraction of pixels whose red channel is white (0.0 for an empty image)."""
    if buf.is_empty:
        return 0.0
    return float(np.count_nonzero(buf.channel(Channel.RED) == MAX_LEVEL)) / buf.pixel_count
