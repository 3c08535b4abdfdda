"""Render policy resolution for a fixed 16:9 frame.

The crop decision is fixed: every image is center-cropped with COVER,
whatever its family. Classification only feeds the ``optimized`` flag and
the quality-dependent render hints.
"""

from __future__ import annotations

from framefit.config import settings
from framefit.core.types import (
    Classification,
    Fit,
    QualityTier,
    RenderHints,
    RenderPolicy,
)

TARGET_ASPECT_RATIO = 16 / 9
# Sources within this distance of 16:9 are displayed without re-framing
ASPECT_TOLERANCE = 0.03
DEFAULT_ANCHOR = "center"


def target_dimensions(target_width: int | None = None) -> tuple[int, int]:
    """Return (width, height) of the 16:9 render frame."""
    width = target_width or settings.TARGET_WIDTH
    return width, round(width / TARGET_ASPECT_RATIO)


def _frame_policy(*, optimized: bool, target_width: int | None) -> RenderPolicy:
    width, height = target_dimensions(target_width)
    return RenderPolicy(
        fit=Fit.COVER,
        anchor=DEFAULT_ANCHOR,
        target_width=width,
        target_height=height,
        optimized=optimized,
    )


FALLBACK_POLICY = _frame_policy(optimized=False, target_width=375)


def fallback_policy(target_width: int | None = None) -> RenderPolicy:
    """Return the safe policy used when analysis cannot complete."""
    width = target_width or settings.TARGET_WIDTH
    if width == FALLBACK_POLICY.target_width:
        return FALLBACK_POLICY
    return _frame_policy(optimized=False, target_width=width)


def resolve(
    classification: Classification | None,
    *,
    target_width: int | None = None,
) -> RenderPolicy:
    """Derive the render policy for a classification.

    Args:
        classification: Result of ``classify``, or None if the probe never
            succeeded.
        target_width: Frame width override (defaults to settings.TARGET_WIDTH).

    Returns:
        RenderPolicy normalized to the 16:9 frame. Without a classification
        this is the fallback policy.
    """
    if classification is None:
        return fallback_policy(target_width)

    delta = abs(classification.aspect_ratio - TARGET_ASPECT_RATIO)
    return _frame_policy(optimized=delta > ASPECT_TOLERANCE, target_width=target_width)


_HINTS_BY_TIER: dict[QualityTier, RenderHints] = {
    QualityTier.HIGH: RenderHints(quality=95, image_rendering="auto"),
    QualityTier.MEDIUM: RenderHints(quality=85, image_rendering="auto"),
    # Upscaled low-res sources look better with sharp edges than blurred
    QualityTier.LOW: RenderHints(quality=75, image_rendering="crisp-edges"),
}


def rendering_hints(classification: Classification | None) -> RenderHints:
    """Return quality-dependent rendering hints.

    Without a classification the MEDIUM hints apply.
    """
    tier = classification.quality_tier if classification else QualityTier.MEDIUM
    return _HINTS_BY_TIER[tier]
