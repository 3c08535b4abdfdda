"""Geometry and quality classification of intrinsic image dimensions.

Classification is pure and total: any positive, finite width/height pair
classifies, and the same input always yields an identical result.

Thresholds:
    Aspect families (evaluated in order, strict comparisons):
        ratio > 2.5 -> ULTRA_WIDE
        ratio < 0.4 -> ULTRA_TALL
        ratio > 1.3 -> LANDSCAPE
        ratio < 0.8 -> PORTRAIT
        otherwise   -> SQUARE

    Quality tiers by total pixels p:
        p > 1920x1080 -> HIGH
        p > 1280x720  -> MEDIUM
        otherwise     -> LOW

    Compression is flagged for p > 1200x1200, independent of tier.
"""

from __future__ import annotations

import math

from framefit.core.types import AspectFamily, Classification, QualityTier
from framefit.geometry import Size

ULTRA_WIDE_MIN_RATIO = 2.5
ULTRA_TALL_MAX_RATIO = 0.4
LANDSCAPE_MIN_RATIO = 1.3
PORTRAIT_MAX_RATIO = 0.8

HIGH_QUALITY_MIN_PIXELS = 1920 * 1080  # 2,073,600
MEDIUM_QUALITY_MIN_PIXELS = 1280 * 720  # 921,600
COMPRESSION_MIN_PIXELS = 1200 * 1200  # 1,440,000


def aspect_family(aspect_ratio: float) -> AspectFamily:
    """Bucket an aspect ratio into an AspectFamily."""
    if aspect_ratio > ULTRA_WIDE_MIN_RATIO:
        return AspectFamily.ULTRA_WIDE
    if aspect_ratio < ULTRA_TALL_MAX_RATIO:
        return AspectFamily.ULTRA_TALL
    if aspect_ratio > LANDSCAPE_MIN_RATIO:
        return AspectFamily.LANDSCAPE
    if aspect_ratio < PORTRAIT_MAX_RATIO:
        return AspectFamily.PORTRAIT
    return AspectFamily.SQUARE


def quality_tier(pixel_count: int) -> QualityTier:
    """Bucket a total pixel count into a QualityTier."""
    if pixel_count > HIGH_QUALITY_MIN_PIXELS:
        return QualityTier.HIGH
    if pixel_count > MEDIUM_QUALITY_MIN_PIXELS:
        return QualityTier.MEDIUM
    return QualityTier.LOW


def classify(width: int, height: int) -> Classification:
    """Classify intrinsic image dimensions.

    Args:
        width: Intrinsic width in pixels (> 0).
        height: Intrinsic height in pixels (> 0).

    Returns:
        Immutable Classification.

    Raises:
        ValueError: If either dimension is non-positive or non-finite.
            Probers filter these out, so this only fires on direct misuse.
    """
    finite = math.isfinite(width) and math.isfinite(height)
    if not finite or width <= 0 or height <= 0:
        raise ValueError(f"Cannot classify degenerate dimensions {width}x{height}")

    source = Size(width=width, height=height)
    aspect_ratio = source.aspect_ratio
    pixel_count = source.area

    return Classification(
        source=source,
        aspect_ratio=aspect_ratio,
        family=aspect_family(aspect_ratio),
        quality_tier=quality_tier(pixel_count),
        compression_needed=pixel_count > COMPRESSION_MIN_PIXELS,
    )
