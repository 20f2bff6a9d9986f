"""
Thresholding step classes with a common interface.

Each step wraps one pure transform and implements the ThresholdStep
interface. Steps never mutate their input buffer.

Usage:
    from thresholding.steps import StretchStep, SelectorStep, Pipeline

    pipeline = Pipeline(steps=[
        StretchStep(),
        SelectorStep(method="entropy"),
    ])
    result = pipeline.run(image)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from config import MAX_LEVEL, DEFAULT_PERCENT_BLACK

from .buffer import PixelBuffer
from .normalization import equalize, stretch
from .selectors import ThresholdMethod, select_threshold
from .threshold import threshold


class ThresholdStep(ABC):
    """Base class for thresholding steps.

    Steps can optionally produce metadata (like the chosen cutoff) that
    callers read back after the step has run.
    """

    @abstractmethod
    def apply(self, buf: PixelBuffer) -> PixelBuffer:
        """Apply this step to an image.

        Must be pure: never mutates the input buffer.

        Args:
            buf: Input image.

        Returns:
            Processed image as a new PixelBuffer.
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for logging and debugging."""
        pass

    def get_metadata(self) -> dict[str, Any]:
        """Return any metadata produced by the last apply()."""
        return {}


@dataclass(frozen=True)
class StretchStep(ThresholdStep):
    """Linear per-channel histogram stretch."""

    def apply(self, buf: PixelBuffer) -> PixelBuffer:
        return stretch(buf)

    @property
    def name(self) -> str:
        return "stretch"


@dataclass(frozen=True)
class EqualizeStep(ThresholdStep):
    """Per-channel histogram equalization."""

    def apply(self, buf: PixelBuffer) -> PixelBuffer:
        return equalize(buf)

    @property
    def name(self) -> str:
        return "equalize"


@dataclass(frozen=True)
class RangeThresholdStep(ThresholdStep):
    """Binarize with an explicit inclusive range.

    Attributes:
        low: Lower bound, 0-255.
        high: Upper bound, 0-255.
    """

    low: int
    high: int = MAX_LEVEL

    def apply(self, buf: PixelBuffer) -> PixelBuffer:
        return threshold(buf, self.low, self.high)

    @property
    def name(self) -> str:
        return f"threshold({self.low},{self.high})"

    def get_metadata(self) -> dict[str, Any]:
        return {
            "method": ThresholdMethod.MANUAL.value,
            "low": self.low,
            "high": self.high,
        }


@dataclass
class SelectorStep(ThresholdStep):
    """Pick a cutoff automatically and binarize with ``[cutoff, 255]``.

    The cutoff is kept as metadata for later retrieval.

    Attributes:
        method: Automatic method name (see ThresholdMethod).
        percent: Black fraction, only used by percent-black.
    """

    method: str
    percent: float = DEFAULT_PERCENT_BLACK
    _cutoff: int | None = field(default=None, init=False, repr=False)

    def apply(self, buf: PixelBuffer) -> PixelBuffer:
        cutoff = select_threshold(buf, self.method, self.percent)
        self._cutoff = cutoff
        return threshold(buf, cutoff, MAX_LEVEL)

    @property
    def name(self) -> str:
        return ThresholdMethod(self.method).value

    def get_metadata(self) -> dict[str, Any]:
        return {
            "method": ThresholdMethod(self.method).value,
            "low": self._cutoff,
            "high": MAX_LEVEL,
        }


@dataclass
class StepResult:
    """Result of applying a single step.

    Attributes:
        name: Name of the step that produced this result.
        image: Output image from the step.
        metadata: Any metadata produced by the step (e.g., low/high).
    """

    name: str
    image: PixelBuffer
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class PipelineStepResults:
    """Results from running a pipeline.

    Attributes:
        original: The original input image.
        steps: List of StepResult for each step in order.
    """

    original: PixelBuffer
    steps: list[StepResult] = field(default_factory=list)

    @property
    def final(self) -> PixelBuffer:
        """Get the final processed image."""
        if not self.steps:
            return self.original
        return self.steps[-1].image

    def get_intermediate(self, step_name: str) -> PixelBuffer | None:
        """Get intermediate image by step name, or None if not found."""
        for step in self.steps:
            if step.name == step_name:
                return step.image
        return None

    def get_metadata(self, key: str) -> Any | None:
        """Get a metadata value, searching steps from last to first."""
        for step in reversed(self.steps):
            if key in step.metadata:
                return step.metadata[key]
        return None

    @property
    def all_metadata(self) -> dict[str, Any]:
        """Get all metadata from all steps, merged into one dict.

        Later steps override earlier ones if keys conflict.
        """
        result = {}
        for step in self.steps:
            result.update(step.metadata)
        return result


@dataclass
class Pipeline:
    """A sequence of steps to apply to an image.

    The pipeline runs each step in order, passing the output of one step
    as the input to the next. All intermediate results are preserved.

    Attributes:
        steps: List of ThresholdStep instances to apply in order.
    """

    steps: list[ThresholdStep]

    def run(self, buf: PixelBuffer) -> PipelineStepResults:
        """Run the pipeline on an image.

        PixelBuffer is immutable, so the original is kept without copying.
        """
        result = PipelineStepResults(original=buf)
        current = buf

        for step in self.steps:
            output = step.apply(current)
            result.steps.append(
                StepResult(
                    name=step.name,
                    image=output,
                    metadata=step.get_metadata(),
                )
            )
            current = output

        return result

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)
