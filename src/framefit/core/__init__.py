"""Core algorithms for framefit.

This package contains the probe -> classify -> resolve pipeline.

Public API:
    - classify: Pure aspect-family / quality-tier classification.
    - resolve / rendering_hints: 16:9 render policy and quality hints.
    - AnalysisController: Bounded retry with a hard deadline.
    - AnalysisSlot: analyze()/retry() with supersession of stale requests.
"""

from framefit.core.classifier import aspect_family, classify, quality_tier
from framefit.core.controller import AnalysisConfig, AnalysisController, RetryState
from framefit.core.policy import (
    FALLBACK_POLICY,
    TARGET_ASPECT_RATIO,
    fallback_policy,
    rendering_hints,
    resolve,
)
from framefit.core.slot import AnalysisSlot
from framefit.core.types import (
    AnalysisOutcome,
    AnalysisState,
    AspectFamily,
    Classification,
    Error,
    Fallback,
    FallbackReason,
    Fit,
    QualityTier,
    RenderHints,
    RenderPolicy,
    Resolved,
)

__all__ = [
    "FALLBACK_POLICY",
    "TARGET_ASPECT_RATIO",
    "AnalysisConfig",
    "AnalysisController",
    "AnalysisOutcome",
    "AnalysisSlot",
    "AnalysisState",
    "AspectFamily",
    "Classification",
    "Error",
    "Fallback",
    "FallbackReason",
    "Fit",
    "QualityTier",
    "RenderHints",
    "RenderPolicy",
    "Resolved",
    "RetryState",
    "aspect_family",
    "classify",
    "fallback_policy",
    "quality_tier",
    "rendering_hints",
    "resolve",
]
