"""
Configuration and result types for a thresholding run.

A run is parameterized through ThresholdConfig so the same decoded image can
be re-thresholded with different settings, which is how an interactive tool
explores strategies without decoding the source again.
"""

from dataclasses import dataclass, field
from typing import Optional, Any

from config import (
    MAX_LEVEL,
    DEFAULT_METHOD,
    DEFAULT_PERCENT_BLACK,
    DEFAULT_THRESHOLD_LOW,
    DEFAULT_THRESHOLD_HIGH,
)

from .buffer import PixelBuffer
from .selectors import ThresholdMethod
from .threshold import white_fraction

NORMALIZATIONS = ("stretch", "equalize")


@dataclass(frozen=True)
class ThresholdConfig:
    """Configuration for one thresholding run.

    Attributes:
        method: Threshold strategy name (see ThresholdMethod).
        normalization: Optional contrast normalization applied first,
                       "stretch" or "equalize". None skips it.
        percent_black: Black fraction used by the percent-black method.
        low: Lower bound of the manual range.
        high: Upper bound of the manual range.
    """

    method: str = DEFAULT_METHOD
    normalization: Optional[str] = None
    percent_black: float = DEFAULT_PERCENT_BLACK
    low: int = DEFAULT_THRESHOLD_LOW
    high: int = DEFAULT_THRESHOLD_HIGH

    @property
    def threshold_method(self) -> ThresholdMethod:
        return ThresholdMethod(self.method)

    def validate(self) -> None:
        """Validate configuration parameters.

        Raises:
            ValueError: If any parameter is invalid.
        """
        try:
            ThresholdMethod(self.method)
        except ValueError:
            choices = ", ".join(m.value for m in ThresholdMethod)
            raise ValueError(f"Unknown method {self.method!r}, expected one of: {choices}")

        if self.normalization is not None and self.normalization not in NORMALIZATIONS:
            raise ValueError(
                f"normalization must be one of {NORMALIZATIONS} or None, "
                f"got {self.normalization!r}"
            )

        if not 0.0 <= self.percent_black <= 1.0:
            raise ValueError(
                f"percent_black must be in [0, 1], got {self.percent_black}"
            )

        for label, value in (("low", self.low), ("high", self.high)):
            if not isinstance(value, int) or not 0 <= value <= MAX_LEVEL:
                raise ValueError(f"{label} must be an integer in [0, {MAX_LEVEL}], got {value!r}")


@dataclass
class ThresholdResult:
    """Result of a thresholding run.

    Attributes:
        original: Source image, unchanged.
        processed: Binarized image.
        low: Lower bound of the range that was applied.
        high: Upper bound of the range that was applied.
        method: Strategy that produced the range.
        config: The configuration used for the run.
        metadata: Aggregated metadata from all steps.
    """

    original: PixelBuffer
    processed: PixelBuffer
    low: int
    high: int
    method: ThresholdMethod
    config: ThresholdConfig
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def threshold_range(self) -> tuple[int, int]:
        return self.low, self.high

    @property
    def normalized(self) -> bool:
        """Whether a normalization step ran before thresholding."""
        return self.config.normalization is not None

    @property
    def white_fraction(self) -> float:
        """Fraction of output pixels that are white."""
        return white_fraction(self.processed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method.value,
            "normalization": self.config.normalization,
            "low": self.low,
            "high": self.high,
            "width": self.processed.width,
            "height": self.processed.height,
            "white_fraction": self.white_fraction,
        }
