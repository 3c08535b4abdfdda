"""Unit tests for the aspect/quality classifier.

Covers:
- Family thresholds, including the strict-comparison boundaries
- Quality tier thresholds
- Compression flag independence from tier
- Determinism (property test)
"""

from __future__ import annotations

import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from framefit.core.classifier import aspect_family, classify, quality_tier
from framefit.core.types import AspectFamily, QualityTier
from framefit.geometry import Size

dimensions = st.integers(min_value=1, max_value=20_000)


class TestAspectFamily:
    """Tests for aspect ratio bucketing."""

    @pytest.mark.parametrize(
        ("width", "height", "expected"),
        [
            (3000, 1000, AspectFamily.ULTRA_WIDE),
            (1920, 1080, AspectFamily.LANDSCAPE),
            (1000, 1000, AspectFamily.SQUARE),
            (1000, 2000, AspectFamily.PORTRAIT),
            (300, 1000, AspectFamily.ULTRA_TALL),
        ],
    )
    def test_families(self, width: int, height: int, expected: AspectFamily) -> None:
        assert classify(width, height).family is expected

    def test_ratio_2_5_is_landscape_not_ultra_wide(self) -> None:
        assert classify(2500, 1000).family is AspectFamily.LANDSCAPE

    def test_ratio_1_3_is_square_not_landscape(self) -> None:
        assert classify(1300, 1000).family is AspectFamily.SQUARE

    def test_ratio_0_8_is_square_not_portrait(self) -> None:
        assert classify(800, 1000).family is AspectFamily.SQUARE

    def test_ratio_0_4_is_portrait_not_ultra_tall(self) -> None:
        assert classify(400, 1000).family is AspectFamily.PORTRAIT

    def test_just_above_2_5_is_ultra_wide(self) -> None:
        assert aspect_family(2.5001) is AspectFamily.ULTRA_WIDE


class TestQualityTier:
    """Tests for pixel-count tiers."""

    def test_1080p_exactly_is_medium(self) -> None:
        assert classify(1920, 1080).quality_tier is QualityTier.MEDIUM

    def test_one_pixel_above_1080p_is_high(self) -> None:
        assert quality_tier(2_073_601) is QualityTier.HIGH

    def test_720p_exactly_is_low(self) -> None:
        assert classify(1280, 720).quality_tier is QualityTier.LOW

    def test_one_pixel_above_720p_is_medium(self) -> None:
        assert quality_tier(921_601) is QualityTier.MEDIUM

    def test_large_image_is_high(self) -> None:
        assert classify(4000, 3000).quality_tier is QualityTier.HIGH


class TestCompressionNeeded:
    """compression_needed is independent of the quality tier."""

    def test_threshold_is_strict(self) -> None:
        assert classify(1200, 1200).compression_needed is False
        assert classify(1201, 1200).compression_needed is True

    def test_medium_tier_can_need_compression(self) -> None:
        result = classify(1000, 2000)  # 2,000,000 px
        assert result.quality_tier is QualityTier.MEDIUM
        assert result.compression_needed is True

    def test_medium_tier_can_skip_compression(self) -> None:
        result = classify(1000, 1000)  # 1,000,000 px
        assert result.quality_tier is QualityTier.MEDIUM
        assert result.compression_needed is False


class TestClassify:
    """General classify() behavior."""

    def test_records_source_and_ratio(self) -> None:
        result = classify(1000, 2000)
        assert result.source == Size(width=1000, height=2000)
        assert result.aspect_ratio == 0.5
        assert result.pixel_count == 2_000_000

    @pytest.mark.parametrize(
        ("width", "height"),
        [(0, 100), (100, 0), (-5, 100), (math.inf, 100), (100, math.nan)],
    )
    def test_rejects_degenerate_dimensions(self, width: float, height: float) -> None:
        with pytest.raises(ValueError, match="degenerate"):
            classify(width, height)  # type: ignore[arg-type]

    @given(width=dimensions, height=dimensions)
    def test_classify_is_deterministic(self, width: int, height: int) -> None:
        assert classify(width, height) == classify(width, height)

    @given(width=dimensions, height=dimensions)
    def test_compression_matches_pixel_threshold(self, width: int, height: int) -> None:
        result = classify(width, height)
        assert result.compression_needed is (width * height > 1_440_000)
        assert result.aspect_ratio == pytest.approx(width / height)
