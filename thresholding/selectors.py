"""
Automatic threshold selection.

Every selector reads the grayscale histogram of a buffer, picks a single
cutoff ``t`` and binarizes with ``threshold(buf, t, 255)``. Each one is
available in two forms:

- ``<name>_threshold(buf, ...) -> int``: just the cutoff
- ``<name>(buf, ...) -> PixelBuffer``: the binarized image

Degenerate inputs (empty images, empty classes, zero variances) never raise
and never leak NaN into the result: candidates whose objective is undefined
are skipped, and a selector with no usable candidate falls back to a cutoff
of 0.
"""

import logging
import math
from enum import Enum
from typing import Callable

import numpy as np

from config import (
    LEVELS,
    MAX_LEVEL,
    DEFAULT_PERCENT_BLACK,
    MEAN_ITERATIVE_TOLERANCE,
    MEAN_ITERATIVE_MAX_ITERATIONS,
)

from .buffer import PixelBuffer
from .histogram import grayscale_histogram
from .threshold import threshold

logger = logging.getLogger(__name__)

# Cutoff used when an algorithm has no defined answer
FALLBACK_CUTOFF = 0

_LEVEL_VALUES = np.arange(LEVELS, dtype=np.float64)


class ThresholdMethod(str, Enum):
    """Names of the threshold strategies."""

    MANUAL = "manual"
    PERCENT_BLACK = "percent-black"
    MEAN_ITERATIVE = "mean-iterative"
    ENTROPY = "entropy"
    MINIMUM_ERROR = "minimum-error"
    FUZZY_MINIMUM_ERROR = "fuzzy-minimum-error"


AUTOMATIC_METHODS: tuple[ThresholdMethod, ...] = tuple(
    method for method in ThresholdMethod if method is not ThresholdMethod.MANUAL
)


def _probabilities(hist: np.ndarray) -> np.ndarray:
    return hist / float(hist.sum())


def _binarize(buf: PixelBuffer, cutoff: int) -> PixelBuffer:
    return threshold(buf, cutoff, MAX_LEVEL)


def shannon(x):
    """Shannon function ``-x log2 x - (1 - x) log2 (1 - x)``.

    Defined as 0 at x == 0 and x == 1 (its limits there) instead of the
    0 * log2(0) indeterminate form.
    """
    x = np.asarray(x, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        value = -x * np.log2(x) - (1.0 - x) * np.log2(1.0 - x)
    return np.where((x <= 0.0) | (x >= 1.0), 0.0, value)


# -----------------------------------------------------------------------------
# Percent black
# -----------------------------------------------------------------------------

def percent_black_threshold(buf: PixelBuffer, percent: float = DEFAULT_PERCENT_BLACK) -> int:
    """Smallest gray level whose cumulative count reaches ``floor(N * percent)``.

    Args:
        buf: Source image.
        percent: Fraction of pixels meant to fall below the cutoff, in [0, 1].

    Raises:
        TypeError: If percent is not a number.
        ValueError: If percent is outside [0, 1].
    """
    if isinstance(percent, bool) or not isinstance(percent, (int, float, np.integer, np.floating)):
        raise TypeError(f"percent must be a number, got {type(percent).__name__}")
    if not 0.0 <= percent <= 1.0:
        raise ValueError(f"percent must be in [0, 1], got {percent}")

    hist = grayscale_histogram(buf)
    target = math.floor(buf.pixel_count * percent)
    reached = np.flatnonzero(np.cumsum(hist) >= target)
    cutoff = int(reached[0]) if reached.size else FALLBACK_CUTOFF
    logger.debug("percent-black(%.4f): target=%d cutoff=%d", percent, target, cutoff)
    return cutoff


def percent_black(buf: PixelBuffer, percent: float = DEFAULT_PERCENT_BLACK) -> PixelBuffer:
    """Binarize so that roughly ``percent`` of the pixels turn black."""
    return _binarize(buf, percent_black_threshold(buf, percent))


# -----------------------------------------------------------------------------
# Mean iterative
# -----------------------------------------------------------------------------

def mean_iterative_threshold(
    buf: PixelBuffer,
    tolerance: float = MEAN_ITERATIVE_TOLERANCE,
    max_iterations: int = MEAN_ITERATIVE_MAX_ITERATIONS,
) -> int:
    """Iterative mean (isodata-style) cutoff.

    Starts from the global mean and repeatedly replaces it with the average of
    the mean of the levels below it and the mean of the levels at or above it,
    until it moves by no more than ``tolerance``. The previous mean starts at
    0, so an image whose mean is already within ``tolerance`` of 0 stops
    immediately.

    If one of the two groups is empty the iteration stops and keeps the
    current mean.
    """
    hist = grayscale_histogram(buf)
    count = int(hist.sum())
    if count == 0:
        logger.debug("mean-iterative: empty image, cutoff=%d", FALLBACK_CUTOFF)
        return FALLBACK_CUTOFF

    weighted = _LEVEL_VALUES * hist
    mean = weighted.sum() / count
    previous = 0.0
    iterations = 0

    while abs(mean - previous) > tolerance:
        if iterations >= max_iterations:
            logger.warning(
                "mean-iterative did not converge after %d iterations (mean=%.4f)",
                iterations,
                mean,
            )
            break

        below = _LEVEL_VALUES < mean
        low_count = hist[below].sum()
        high_count = hist[~below].sum()
        if low_count == 0 or high_count == 0:
            logger.debug("mean-iterative: one group is empty at mean=%.4f, stopping", mean)
            break

        low_mean = weighted[below].sum() / low_count
        high_mean = weighted[~below].sum() / high_count
        previous = mean
        mean = (low_mean + high_mean) / 2.0
        iterations += 1

    cutoff = int(mean)
    logger.debug("mean-iterative: %d iterations, cutoff=%d", iterations, cutoff)
    return cutoff


def mean_iterative(buf: PixelBuffer) -> PixelBuffer:
    """Binarize at the iterative mean cutoff."""
    return _binarize(buf, mean_iterative_threshold(buf))


# -----------------------------------------------------------------------------
# Entropy
# -----------------------------------------------------------------------------

def entropy_objective(p: np.ndarray) -> np.ndarray:
    """Entropy objective for every candidate cutoff 0..255.

    ``maxHigh`` for candidate i is the larger of ``p[i+1]`` and the maximum of
    ``p[i+2:]``; at i == 255 it is ``p[255]``.

    Returns:
        256 objective values; undefined candidates are NaN or infinite.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        plogp = np.where(p > 0, p * np.log2(p), 0.0)
        total_entropy = -plogp.sum()

        low_entropy = -np.cumsum(plogp)
        cumulative = np.cumsum(p)
        max_low = np.maximum.accumulate(p)

        suffix_max = np.maximum.accumulate(p[::-1])[::-1]
        max_high = np.empty_like(p)
        max_high[:-1] = np.maximum(p[1:], np.append(suffix_max[2:], -np.inf))
        max_high[-1] = p[-1]

        return (
            low_entropy * np.log2(cumulative) / (total_entropy * np.log2(max_low))
            + (1.0 - low_entropy / total_entropy)
            * np.log2(1.0 - cumulative)
            / np.log2(max_high)
        )


def entropy_threshold(buf: PixelBuffer) -> int:
    """Kapur-style entropy cutoff: the candidate maximizing the objective.

    Candidates with an undefined (non-finite) objective are skipped.
    """
    hist = grayscale_histogram(buf)
    if hist.sum() == 0:
        logger.debug("entropy: empty image, cutoff=%d", FALLBACK_CUTOFF)
        return FALLBACK_CUTOFF

    objective = entropy_objective(_probabilities(hist))
    valid = np.isfinite(objective)
    if not valid.any():
        logger.debug("entropy: no defined candidate, cutoff=%d", FALLBACK_CUTOFF)
        return FALLBACK_CUTOFF

    cutoff = int(np.argmax(np.where(valid, objective, -np.inf)))
    logger.debug("entropy: cutoff=%d objective=%.6f", cutoff, objective[cutoff])
    return cutoff


def entropy(buf: PixelBuffer) -> PixelBuffer:
    """Binarize at the entropy cutoff."""
    return _binarize(buf, entropy_threshold(buf))


# -----------------------------------------------------------------------------
# Minimum error (Kittler-Illingworth)
# -----------------------------------------------------------------------------

def _class_moments(levels: np.ndarray, p: np.ndarray) -> tuple[float, float, float]:
    """Return (probability, mean, variance) of one class; zeros when empty."""
    weight = p.sum()
    if weight <= 0:
        return 0.0, 0.0, 0.0
    mean = np.dot(levels, p) / weight
    variance = np.dot((levels - mean) ** 2, p) / weight
    return float(weight), float(mean), float(variance)


def _split_index(populated: np.ndarray, cutoff: int) -> int:
    """Number of populated levels at or below ``cutoff``."""
    return int(np.searchsorted(populated, cutoff, side="right"))


def minimum_error_objective(p: np.ndarray) -> np.ndarray:
    """Kittler-Illingworth criterion J for every candidate cutoff 0..255.

    ``J = 1 + 2 (p1 log2 s1 - p1 log2 p1 + p2 (log2 s2 - log2 p2))`` where the
    low class holds levels 0..i and the high class levels i+1..255.

    Class moments are summed over populated levels only, so candidates
    inside an empty gap of the histogram get bit-identical values.
    """
    populated = np.flatnonzero(p > 0)
    levels = _LEVEL_VALUES[populated]
    weights = p[populated]

    values = np.empty(LEVELS, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        for i in range(LEVELS):
            k = _split_index(populated, i)
            p1, _, s1 = _class_moments(levels[:k], weights[:k])
            p2, _, s2 = _class_moments(levels[k:], weights[k:])
            values[i] = 1.0 + 2.0 * (
                p1 * np.log2(s1)
                - p1 * np.log2(p1)
                + p2 * (np.log2(s2) - np.log2(p2))
            )
    return values


def minimum_error_threshold(buf: PixelBuffer) -> int:
    """Minimum-error cutoff: the first candidate minimizing J.

    Candidates where J is NaN or infinite (an empty or zero-variance class)
    are skipped.
    """
    hist = grayscale_histogram(buf)
    if hist.sum() == 0:
        logger.debug("minimum-error: empty image, cutoff=%d", FALLBACK_CUTOFF)
        return FALLBACK_CUTOFF

    objective = minimum_error_objective(_probabilities(hist))
    valid = ~(np.isnan(objective) | np.isinf(objective))
    if not valid.any():
        logger.debug("minimum-error: no defined candidate, cutoff=%d", FALLBACK_CUTOFF)
        return FALLBACK_CUTOFF

    cutoff = int(np.argmin(np.where(valid, objective, np.inf)))
    logger.debug("minimum-error: cutoff=%d J=%.6f", cutoff, objective[cutoff])
    return cutoff


def minimum_error(buf: PixelBuffer) -> PixelBuffer:
    """Binarize at the minimum-error cutoff."""
    return _binarize(buf, minimum_error_threshold(buf))


# -----------------------------------------------------------------------------
# Fuzzy minimum error
# -----------------------------------------------------------------------------

def _fuzzy_class_error(levels: np.ndarray, counts: np.ndarray, spread: float) -> float:
    mean = np.dot(levels, counts) / counts.sum()
    membership = spread / (spread + np.abs(levels - mean))
    return float(np.dot(shannon(membership), counts))


def fuzzy_minimum_error_objective(hist: np.ndarray) -> np.ndarray:
    """Fuzzy error for every candidate cutoff 0..254.

    With ``c = max - min`` over the populated gray levels, each level i of a
    class with mean mu has membership ``c / (c + |i - mu|)``. The fuzzy error
    of candidate t is the count-weighted Shannon function of the memberships,
    normalized by the pixel count. As with the minimum-error criterion only
    populated levels enter the sums.

    Returns:
        255 values; candidates that leave a class empty are NaN.
    """
    values = np.full(MAX_LEVEL, np.nan)
    populated = np.flatnonzero(hist)
    if populated.size == 0:
        return values

    levels = _LEVEL_VALUES[populated]
    counts = hist[populated].astype(np.float64)
    spread = float(levels[-1] - levels[0])
    total = counts.sum()

    for t in range(MAX_LEVEL):
        k = _split_index(populated, t)
        if k == 0 or k == populated.size:
            continue
        values[t] = (
            _fuzzy_class_error(levels[:k], counts[:k], spread)
            + _fuzzy_class_error(levels[k:], counts[k:], spread)
        ) / total
    return values


def fuzzy_minimum_error_threshold(buf: PixelBuffer) -> int:
    """Fuzzy minimum-error cutoff: the first candidate minimizing the error.

    Candidates that leave a class empty are skipped.
    """
    hist = grayscale_histogram(buf)
    if hist.sum() == 0:
        logger.debug("fuzzy-minimum-error: empty image, cutoff=%d", FALLBACK_CUTOFF)
        return FALLBACK_CUTOFF

    objective = fuzzy_minimum_error_objective(hist)
    valid = ~np.isnan(objective)
    if not valid.any():
        logger.debug("fuzzy-minimum-error: fewer than two gray levels, cutoff=%d", FALLBACK_CUTOFF)
        return FALLBACK_CUTOFF

    cutoff = int(np.argmin(np.where(valid, objective, np.inf)))
    logger.debug("fuzzy-minimum-error: cutoff=%d error=%.6f", cutoff, objective[cutoff])
    return cutoff


def fuzzy_minimum_error(buf: PixelBuffer) -> PixelBuffer:
    """Binarize at the fuzzy minimum-error cutoff."""
    return _binarize(buf, fuzzy_minimum_error_threshold(buf))


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------

SELECTORS: dict[ThresholdMethod, Callable[..., int]] = {
    ThresholdMethod.PERCENT_BLACK: percent_black_threshold,
    ThresholdMethod.MEAN_ITERATIVE: mean_iterative_threshold,
    ThresholdMethod.ENTROPY: entropy_threshold,
    ThresholdMethod.MINIMUM_ERROR: minimum_error_threshold,
    ThresholdMethod.FUZZY_MINIMUM_ERROR: fuzzy_minimum_error_threshold,
}


def select_threshold(
    buf: PixelBuffer,
    method: ThresholdMethod | str,
    percent: float = DEFAULT_PERCENT_BLACK,
) -> int:
    """Compute the cutoff of an automatic method given by enum or name.

    Args:
        buf: Source image.
        method: One of the automatic ThresholdMethod values.
        percent: Black fraction, only used by percent-black.

    Raises:
        ValueError: If the method is unknown or is the manual method.
    """
    method = ThresholdMethod(method)
    if method is ThresholdMethod.MANUAL:
        raise ValueError("manual thresholding takes an explicit (low, high) range")
    if method is ThresholdMethod.PERCENT_BLACK:
        return percent_black_threshold(buf, percent)
    return SELECTORS[method](buf)
