"""Type definitions for the resource probing layer.

A probe is a single asynchronous attempt to load an image resource and read
its intrinsic pixel dimensions. Probers never raise for expected failures;
they report them as ``ProbeFailed`` so the controller can decide what to do.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class ProbeFailure(str, Enum):
    """Why a single probe attempt failed."""

    NETWORK_ERROR = "network_error"  # Unreachable, transport timeout, bad status
    CORS_ERROR = "cors_error"  # Cross-origin access rejected
    INVALID_DIMENSIONS = "invalid_dimensions"  # Loaded, but size is unusable


@dataclass(frozen=True)
class ProbeLoaded:
    """Successful probe carrying true intrinsic dimensions.

    Attributes:
        width: Intrinsic width in pixels (> 0).
        height: Intrinsic height in pixels (> 0).
    """

    width: int
    height: int

    def __post_init__(self) -> None:
        finite = math.isfinite(self.width) and math.isfinite(self.height)
        if not finite or self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"ProbeLoaded requires positive finite dimensions, got "
                f"{self.width}x{self.height}"
            )


@dataclass(frozen=True)
class ProbeFailed:
    """Failed probe.

    Attributes:
        reason: Failure category driving the retry state machine.
        detail: Human-readable message for logs.
    """

    reason: ProbeFailure
    detail: str = ""


ProbeResult = ProbeLoaded | ProbeFailed


class ProberProtocol(Protocol):
    """Protocol for the "load resource and report dimensions" capability.

    This protocol allows for dependency injection and testing with
    mock implementations.
    """

    async def probe(self, ref: str, allow_cross_origin: bool) -> ProbeResult:
        """Perform one load attempt against ``ref``.

        Args:
            ref: Non-empty resource locator.
            allow_cross_origin: Whether to request the resource in
                cross-origin mode. The controller retries with ``False``
                when a cross-origin attempt reports ``CORS_ERROR``.

        Returns:
            ProbeLoaded with intrinsic dimensions, or ProbeFailed.
        """
        ...
