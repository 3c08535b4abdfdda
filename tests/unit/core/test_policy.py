"""Unit tests for render policy resolution."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from framefit.core.classifier import classify
from framefit.core.policy import (
    FALLBACK_POLICY,
    TARGET_ASPECT_RATIO,
    fallback_policy,
    rendering_hints,
    resolve,
    target_dimensions,
)
from framefit.core.types import Fit, RenderHints


class TestFallbackPolicy:
    """The fallback policy is fixed and always available."""

    def test_fallback_values(self) -> None:
        assert FALLBACK_POLICY.fit is Fit.COVER
        assert FALLBACK_POLICY.anchor == "center"
        assert FALLBACK_POLICY.target_width == 375
        assert FALLBACK_POLICY.target_height == 211
        assert FALLBACK_POLICY.optimized is False

    def test_resolve_without_classification_is_fallback(self) -> None:
        assert resolve(None) == FALLBACK_POLICY

    def test_fallback_policy_default_width_is_constant(self) -> None:
        assert fallback_policy() is FALLBACK_POLICY

    def test_fallback_policy_scales_with_width(self) -> None:
        policy = fallback_policy(target_width=640)
        assert (policy.target_width, policy.target_height) == (640, 360)
        assert policy.optimized is False


class TestResolve:
    """Resolution from a classification."""

    def test_1080p_needs_no_optimization(self) -> None:
        policy = resolve(classify(1920, 1080))
        assert policy.optimized is False
        assert policy.target_width == 375
        assert policy.target_height == 211

    def test_portrait_is_optimized_but_still_center_cover(self) -> None:
        policy = resolve(classify(1000, 2000))
        assert policy.optimized is True
        assert policy.fit is Fit.COVER
        assert policy.anchor == "center"

    def test_tolerance_boundary(self) -> None:
        # 1.80 is within 0.03 of 16/9; 1.85 is not
        assert resolve(classify(1800, 1000)).optimized is False
        assert resolve(classify(1850, 1000)).optimized is True

    @pytest.mark.parametrize(
        ("width", "height"),
        [(3000, 1000), (1000, 1000), (300, 1000), (1000, 2000)],
    )
    def test_crop_is_fixed_for_every_family(self, width: int, height: int) -> None:
        policy = resolve(classify(width, height))
        assert policy.fit is Fit.COVER
        assert policy.anchor == "center"
        assert (policy.target_width, policy.target_height) == (375, 211)

    @given(
        width=st.integers(min_value=1, max_value=10_000),
        height=st.integers(min_value=1, max_value=10_000),
    )
    def test_optimized_iff_outside_tolerance(self, width: int, height: int) -> None:
        policy = resolve(classify(width, height))
        assert policy.optimized is (abs(width / height - TARGET_ASPECT_RATIO) > 0.03)

    def test_target_width_override(self) -> None:
        policy = resolve(classify(1920, 1080), target_width=1280)
        assert (policy.target_width, policy.target_height) == (1280, 720)


def test_target_dimensions_default() -> None:
    assert target_dimensions() == (375, 211)


class TestRenderingHints:
    """Quality-dependent hints never touch the crop policy."""

    def test_high(self) -> None:
        assert rendering_hints(classify(4000, 3000)) == RenderHints(
            quality=95, image_rendering="auto"
        )

    def test_medium(self) -> None:
        assert rendering_hints(classify(1920, 1080)).quality == 85

    def test_low_uses_crisp_edges(self) -> None:
        hints = rendering_hints(classify(640, 480))
        assert hints.quality == 75
        assert hints.image_rendering == "crisp-edges"

    def test_no_classification_uses_medium(self) -> None:
        assert rendering_hints(None).quality == 85
