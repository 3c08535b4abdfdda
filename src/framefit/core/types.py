"""Value types for classification, render policy, and analysis outcomes.

Everything here is immutable: a policy handed to a caller is never mutated.
Callers that need a different policy request a new analysis.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field

from framefit.geometry import Size


class AspectFamily(str, Enum):
    """Coarse orientation bucket derived from the aspect ratio."""

    ULTRA_WIDE = "ultra-wide"
    LANDSCAPE = "landscape"
    SQUARE = "square"
    PORTRAIT = "portrait"
    ULTRA_TALL = "ultra-tall"


class QualityTier(str, Enum):
    """Resolution bucket derived from total pixel count."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Fit(str, Enum):
    """Crop strategy for mapping a source onto the display frame."""

    COVER = "cover"  # Fill the frame, cropping excess
    CONTAIN = "contain"  # Fit inside the frame, letterboxing
    FILL = "fill"  # Stretch to the frame


class Classification(BaseModel, frozen=True):
    """Geometric and quality characteristics of a loaded image.

    Attributes:
        source: Intrinsic dimensions the classification was computed from.
        aspect_ratio: width / height.
        family: Orientation bucket.
        quality_tier: Resolution bucket.
        compression_needed: True when the image exceeds the compression
            threshold, independent of quality_tier.
    """

    source: Size
    aspect_ratio: float = Field(..., gt=0)
    family: AspectFamily
    quality_tier: QualityTier
    compression_needed: bool

    @property
    def pixel_count(self) -> int:
        """Total pixel count of the source."""
        return self.source.area


class RenderPolicy(BaseModel, frozen=True):
    """Resolved rendering configuration handed to the caller.

    Attributes:
        fit: Crop strategy.
        anchor: Crop anchor point (CSS object-position syntax).
        target_width: Render width in pixels.
        target_height: Render height in pixels.
        optimized: True when the source had to be re-framed to reach the
            target aspect ratio.
    """

    fit: Fit
    anchor: str
    target_width: int = Field(..., gt=0)
    target_height: int = Field(..., gt=0)
    optimized: bool


class RenderHints(BaseModel, frozen=True):
    """Quality-dependent hints for downstream rendering.

    Attributes:
        quality: Encoder quality (1-100) to request from the image pipeline.
        image_rendering: CSS image-rendering value ("auto" or "crisp-edges").
    """

    quality: int = Field(..., ge=1, le=100)
    image_rendering: str


class FallbackReason(str, Enum):
    """Why an analysis ended with the fallback policy."""

    EMPTY_REF = "empty_ref"
    RETRIES_EXHAUSTED = "retries_exhausted"
    DEADLINE_EXCEEDED = "deadline_exceeded"


class AnalysisState(str, Enum):
    """Controller state for one analysis invocation."""

    IDLE = "idle"
    PROBING = "probing"
    RESOLVED = "resolved"
    FALLBACK = "fallback"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (
            AnalysisState.RESOLVED,
            AnalysisState.FALLBACK,
            AnalysisState.ERROR,
        )


@dataclass(frozen=True)
class Resolved:
    """Analysis completed with a classification."""

    ref: str
    classification: Classification
    policy: RenderPolicy
    hints: RenderHints
    attempts: int
    elapsed_ms: int


@dataclass(frozen=True)
class Fallback:
    """Analysis ended without a classification; the fallback policy applies."""

    ref: str
    policy: RenderPolicy
    hints: RenderHints
    reason: FallbackReason
    attempts: int
    elapsed_ms: int


@dataclass(frozen=True)
class Error:
    """The prober broke its contract. Rendering still gets the fallback policy."""

    ref: str
    reason: str
    policy: RenderPolicy
    hints: RenderHints
    attempts: int
    elapsed_ms: int


AnalysisOutcome = Resolved | Fallback | Error
