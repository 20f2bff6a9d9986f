"""
Histogram construction for RGBA8 pixel buffers.

All functions are pure: histograms are recomputed from the buffer on every
call and nothing is cached between calls.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np

from config import (
    LEVELS,
    LUMA_WEIGHT_RED,
    LUMA_WEIGHT_GREEN,
    LUMA_WEIGHT_BLUE,
    LUMA_WEIGHT_SCALE,
)

from .buffer import COLOR_CHANNELS, Channel, PixelBuffer

# Per-channel 256-bucket counts, keyed by RED/GREEN/BLUE
ChannelHistogram = dict[Channel, np.ndarray]


def _count_levels(values: np.ndarray) -> np.ndarray:
    return np.bincount(values.ravel(), minlength=LEVELS).astype(np.int64)


def channel_histogram(buf: PixelBuffer) -> ChannelHistogram:
    """Count the 8-bit values of each color channel.

    Alpha is never histogrammed. A zero-size buffer yields all-zero arrays.

    Args:
        buf: Source image.

    Returns:
        Dict mapping RED, GREEN and BLUE to a 256-length int64 count array.
        Each array sums to ``buf.width * buf.height``.
    """
    return {channel: _count_levels(buf.channel(channel)) for channel in COLOR_CHANNELS}


def luminance(buf: PixelBuffer) -> np.ndarray:
    """Compute per-pixel gray levels.

    Uses ``0.2126 R + 0.7152 G + 0.0722 B`` truncated toward zero. The weights
    are applied in fixed point so a pure gray pixel (v, v, v) always maps to
    exactly v.

    Returns:
        (H, W) uint8 array of gray levels.
    """
    rgb = buf.as_array()[:, :, :3].astype(np.int64)
    weighted = (
        rgb[:, :, Channel.RED] * LUMA_WEIGHT_RED
        + rgb[:, :, Channel.GREEN] * LUMA_WEIGHT_GREEN
        + rgb[:, :, Channel.BLUE] * LUMA_WEIGHT_BLUE
    )
    return (weighted // LUMA_WEIGHT_SCALE).astype(np.uint8)


def grayscale_histogram(buf: PixelBuffer) -> np.ndarray:
    """Count pixel luminance values.

    Returns:
        256-length int64 count array summing to ``buf.width * buf.height``.
    """
    return _count_levels(luminance(buf))


def merge_histograms(parts: Iterable[np.ndarray]) -> np.ndarray:
    """Sum partial histograms elementwise.

    Histogram accumulation is commutative and associative, so histograms of
    disjoint pixel ranges can be computed separately and merged here.
    """
    total = np.zeros(LEVELS, dtype=np.int64)
    for part in parts:
        part = np.asarray(part)
        if part.shape != (LEVELS,):
            raise ValueError(f"Expected a {LEVELS}-bucket histogram, got shape {part.shape}")
        total += part.astype(np.int64)
    return total


def populated_range(hist: np.ndarray) -> Optional[tuple[int, int]]:
    """Return (min, max) levels with a nonzero count, or None if empty."""
    levels = np.flatnonzero(hist)
    if levels.size == 0:
        return None
    return int(levels[0]), int(levels[-1])


@dataclass(frozen=True)
class HistogramSummary:
    """Summary statistics of a 256-bucket histogram.

    Attributes:
        total: Number of counted pixels.
        min_level: Lowest populated level (None for an empty histogram).
        max_level: Highest populated level (None for an empty histogram).
        mean: Count-weighted mean level (None for an empty histogram).
    """

    total: int
    min_level: Optional[int]
    max_level: Optional[int]
    mean: Optional[float]

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "min": self.min_level,
            "max": self.max_level,
            "mean": self.mean,
        }


def histogram_summary(hist: np.ndarray) -> HistogramSummary:
    """Summarize a histogram for reporting."""
    total = int(hist.sum())
    bounds = populated_range(hist)
    if bounds is None:
        return HistogramSummary(total=0, min_level=None, max_level=None, mean=None)

    mean = float(np.dot(np.arange(LEVELS), hist) / total)
    return HistogramSummary(
        total=total,
        min_level=bounds[0],
        max_level=bounds[1],
        mean=mean,
    )
