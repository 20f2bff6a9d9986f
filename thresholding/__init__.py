"""
Histogram statistics and binarization thresholds for RGBA images.

This module provides pure, deterministic functions over immutable pixel
buffers. Every transform takes a PixelBuffer and returns a new one, so a
decoded image can be re-thresholded any number of times.

Key components:
- buffer: PixelBuffer data model and the Channel enumeration
- histogram: per-channel and grayscale histograms
- normalization: stretch() and equalize() contrast normalization
- threshold: threshold(), the manual range binarization
- selectors: five automatic cutoff selectors built on threshold()
- codec: decode_image() / load_image() via Pillow
- config: ThresholdConfig and ThresholdResult
- steps / pipeline: composable steps and the run_threshold() function API
"""

from .buffer import PixelBuffer, Channel, COLOR_CHANNELS
from .histogram import (
    channel_histogram,
    grayscale_histogram,
    luminance,
    merge_histograms,
    histogram_summary,
    HistogramSummary,
)
from .normalization import equalize, stretch
from .threshold import threshold, white_fraction
from .selectors import (
    ThresholdMethod,
    AUTOMATIC_METHODS,
    percent_black,
    percent_black_threshold,
    mean_iterative,
    mean_iterative_threshold,
    entropy,
    entropy_threshold,
    minimum_error,
    minimum_error_threshold,
    fuzzy_minimum_error,
    fuzzy_minimum_error_threshold,
    select_threshold,
)
from .codec import DecodeError, decode_image, load_image
from .config import ThresholdConfig, ThresholdResult
from .steps import (
    ThresholdStep,
    StretchStep,
    EqualizeStep,
    RangeThresholdStep,
    SelectorStep,
    Pipeline,
    PipelineStepResults,
    StepResult,
)
from .pipeline import build_pipeline, run_threshold, compare_methods

__all__ = [
    # Data model
    "PixelBuffer",
    "Channel",
    "COLOR_CHANNELS",
    # Histograms
    "channel_histogram",
    "grayscale_histogram",
    "luminance",
    "merge_histograms",
    "histogram_summary",
    "HistogramSummary",
    # Transforms
    "equalize",
    "stretch",
    "threshold",
    "white_fraction",
    # Selectors
    "ThresholdMethod",
    "AUTOMATIC_METHODS",
    "percent_black",
    "percent_black_threshold",
    "mean_iterative",
    "mean_iterative_threshold",
    "entropy",
    "entropy_threshold",
    "minimum_error",
    "minimum_error_threshold",
    "fuzzy_minimum_error",
    "fuzzy_minimum_error_threshold",
    "select_threshold",
    # Codec
    "DecodeError",
    "decode_image",
    "load_image",
    # Config and results
    "ThresholdConfig",
    "ThresholdResult",
    # Class-based API
    "ThresholdStep",
    "StretchStep",
    "EqualizeStep",
    "RangeThresholdStep",
    "SelectorStep",
    "Pipeline",
    "PipelineStepResults",
    "StepResult",
    # Function API
    "build_pipeline",
    "run_threshold",
    "compare_methods",
]
