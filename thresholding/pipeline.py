"""
Thresholding pipeline: optional normalization followed by binarization.

This module provides the function API on top of the step classes:

1. build_pipeline() - turn a ThresholdConfig into a Pipeline
2. run_threshold() - run one configured thresholding pass
3. compare_methods() - run every automatic selector on the same source

The source buffer is never modified, so one decoded image can be fed to
any number of runs.
"""

import logging

from config import DEFAULT_PERCENT_BLACK

from .buffer import PixelBuffer
from .config import ThresholdConfig, ThresholdResult
from .selectors import AUTOMATIC_METHODS, ThresholdMethod, select_threshold
from .steps import (
    Pipeline,
    ThresholdStep,
    StretchStep,
    EqualizeStep,
    RangeThresholdStep,
    SelectorStep,
)

logger = logging.getLogger(__name__)


def _validate_input(buf: PixelBuffer) -> None:
    """Raise TypeError if buf is not a PixelBuffer."""
    if not isinstance(buf, PixelBuffer):
        raise TypeError(f"Expected PixelBuffer, got {type(buf).__name__}")


def build_pipeline(config: ThresholdConfig) -> Pipeline:
    """Build a Pipeline from a ThresholdConfig.

    1. StretchStep / EqualizeStep - if normalization is configured
    2. RangeThresholdStep - for the manual method
       SelectorStep - for every automatic method
    """
    steps: list[ThresholdStep] = []

    if config.normalization == "stretch":
        steps.append(StretchStep())
    elif config.normalization == "equalize":
        steps.append(EqualizeStep())

    if config.threshold_method is ThresholdMethod.MANUAL:
        steps.append(RangeThresholdStep(low=config.low, high=config.high))
    else:
        steps.append(
            SelectorStep(method=config.method, percent=config.percent_black)
        )

    return Pipeline(steps=steps)


def run_threshold(
    buf: PixelBuffer,
    config: ThresholdConfig | None = None,
) -> ThresholdResult:
    """Apply one configured thresholding pass to an image.

    Args:
        buf: Source image.
        config: Thresholding configuration. If None, uses default settings.

    Returns:
        ThresholdResult with the original, the binarized image and the
        applied (low, high) range.

    Raises:
        ValueError: If the configuration is invalid.
        TypeError: If buf is not a PixelBuffer.
    """
    if config is None:
        config = ThresholdConfig()

    config.validate()
    _validate_input(buf)

    pipeline = build_pipeline(config)
    pipeline_result = pipeline.run(buf)
    metadata = pipeline_result.all_metadata

    logger.debug(
        "%s on %dx%d image: range=(%s, %s)",
        " -> ".join(step.name for step in pipeline_result.steps),
        buf.width,
        buf.height,
        metadata["low"],
        metadata["high"],
    )

    return ThresholdResult(
        original=buf,
        processed=pipeline_result.final,
        low=metadata["low"],
        high=metadata["high"],
        method=config.threshold_method,
        config=config,
        metadata=metadata,
    )


def compare_methods(
    buf: PixelBuffer,
    percent: float = DEFAULT_PERCENT_BLACK,
) -> dict[ThresholdMethod, int]:
    """Compute the cutoff of every automatic method on the same image.

    Returns:
        Dict mapping each automatic ThresholdMethod to its cutoff, in
        declaration order.
    """
    _validate_input(buf)
    return {
        method: select_threshold(buf, method, percent)
        for method in AUTOMATIC_METHODS
    }
