"""
Contrast normalization: histogram stretching and equalization.

Both transforms work on each of R, G and B independently through a
256-entry lookup table and leave alpha untouched. They are pure: the input
buffer is never modified and a new PixelBuffer is returned.

Degenerate channels (a constant channel for stretch, a channel where every
pixel sits at level 0 for equalize) would divide by zero. Such channels are
left unchanged instead of being filled with undefined values.
"""

import logging

import cv2
import numpy as np

from config import LEVELS, MAX_LEVEL

from .buffer import COLOR_CHANNELS, Channel, PixelBuffer
from .histogram import channel_histogram, populated_range

logger = logging.getLogger(__name__)


def _apply_channel_luts(buf: PixelBuffer, luts: dict[Channel, np.ndarray]) -> PixelBuffer:
    """Remap each channel in ``luts`` through its lookup table."""
    source = buf.as_array()
    result = source.copy()
    for channel, lut in luts.items():
        plane = np.ascontiguousarray(source[:, :, channel])
        result[:, :, channel] = cv2.LUT(plane, lut)
    return PixelBuffer.from_array(result)


def equalization_lut(hist: np.ndarray) -> np.ndarray | None:
    """Build the equalization lookup table for one channel histogram.

    ``min_cdf`` is the running minimum of the cumulative sum, which for a
    non-decreasing sequence is always ``cdf[0]``. This is deliberately not the
    minimum *nonzero* cdf of the textbook formula.

    Returns:
        256-entry uint8 table, or None when the channel is degenerate
        (empty image, or every pixel at level 0).
    """
    cdf = np.cumsum(hist, dtype=np.int64)
    total = int(cdf[-1])
    min_cdf = int(cdf[0])
    if total == min_cdf:
        return None

    scaled = (cdf - min_cdf) / float(total - min_cdf) * MAX_LEVEL
    # Round half away from zero; every value here is non-negative
    return np.floor(scaled + 0.5).astype(np.uint8)


def stretch_lut(hist: np.ndarray) -> np.ndarray | None:
    """Build the linear stretch lookup table for one channel histogram.

    Maps the populated range [min, max] onto [0, 255] with truncation.

    Returns:
        256-entry uint8 table, or None when the channel is empty or constant.
    """
    bounds = populated_range(hist)
    if bounds is None:
        return None
    low, high = bounds
    if low == high:
        return None

    levels = np.arange(LEVELS, dtype=np.int64)
    # Integer floor division truncates exactly; levels outside the populated
    # range never occur in the image but are clipped to keep the table valid.
    scaled = (levels - low) * MAX_LEVEL // (high - low)
    return np.clip(scaled, 0, MAX_LEVEL).astype(np.uint8)


def equalize(buf: PixelBuffer) -> PixelBuffer:
    """Equalize each color channel through its cumulative distribution.

    New value = ``round((cdf[v] - cdf[0]) / (total - cdf[0]) * 255)``.

    Equalizing an already equalized image is not guaranteed to return the
    same image; the transform is not idempotent.

    Args:
        buf: Source image.

    Returns:
        New PixelBuffer. Degenerate channels are copied unchanged.
    """
    histograms = channel_histogram(buf)
    luts = {}
    for channel in COLOR_CHANNELS:
        lut = equalization_lut(histograms[channel])
        if lut is None:
            logger.debug("equalize: %s channel is degenerate, left unchanged", channel.name)
            continue
        luts[channel] = lut
    return _apply_channel_luts(buf, luts)


def stretch(buf: PixelBuffer) -> PixelBuffer:
    """Stretch each color channel's observed range to [0, 255].

    New value = ``trunc((v - min) / (max - min) * 255)``.

    Args:
        buf: Source image.

    Returns:
        New PixelBuffer. Constant channels are copied unchanged.
    """
    histograms = channel_histogram(buf)
    luts = {}
    for channel in COLOR_CHANNELS:
        lut = stretch_lut(histograms[channel])
        if lut is None:
            logger.debug("stretch: %s channel is constant, left unchanged", channel.name)
            continue
        luts[channel] = lut
    return _apply_channel_luts(buf, luts)
