"""Custom exceptions for probe failures.

These exceptions carry failures through the retry machinery. They never
leave the engine: ``HttpProber.probe`` turns them into ``ProbeFailed`` and
the controller turns ``ProbeFailed`` back into them so tenacity can decide
whether to retry.
"""

from __future__ import annotations

from framefit.probe.types import ProbeFailed, ProbeFailure


class ProbeError(Exception):
    """Base exception for all probe failures."""

    reason: ProbeFailure = ProbeFailure.NETWORK_ERROR

    def __init__(self, message: str, ref: str | None = None) -> None:
        """Initialize probe error with optional ref context.

        Args:
            message: Human-readable error description.
            ref: Resource reference that was being probed.
        """
        self.ref = ref
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with ref and reason context."""
        parts = [f"reason={self.reason.value}"]
        if self.ref:
            parts.append(f"ref={shorten_ref(self.ref)}")
        return f"{self.message} ({', '.join(parts)})"

    def to_result(self) -> ProbeFailed:
        """Convert to the non-raising probe result."""
        return ProbeFailed(reason=self.reason, detail=str(self))

    @classmethod
    def from_result(cls, result: ProbeFailed, ref: str | None = None) -> ProbeError:
        """Build the exception subclass matching a failed probe result."""
        error_cls = _BY_REASON[result.reason]
        return error_cls(result.detail or "Probe failed", ref)


class NetworkProbeError(ProbeError):
    """Raised when the resource is unreachable.

    This covers:
    - Connection and transport-level timeout errors
    - Non-2xx HTTP responses
    - Unsupported or malformed locators
    """

    reason = ProbeFailure.NETWORK_ERROR


class CorsProbeError(ProbeError):
    """Raised when cross-origin access to the resource is rejected."""

    reason = ProbeFailure.CORS_ERROR


class InvalidDimensionsError(ProbeError):
    """Raised when a resource loads but reports an unusable size.

    This covers:
    - Zero, negative, or non-finite width/height
    - Payloads that are not a decodable image
    """

    reason = ProbeFailure.INVALID_DIMENSIONS


_BY_REASON: dict[ProbeFailure, type[ProbeError]] = {
    ProbeFailure.NETWORK_ERROR: NetworkProbeError,
    ProbeFailure.CORS_ERROR: CorsProbeError,
    ProbeFailure.INVALID_DIMENSIONS: InvalidDimensionsError,
}


def shorten_ref(ref: str, limit: int = 80) -> str:
    """Truncate a ref for log output; data: URIs can be megabytes long."""
    if len(ref) <= limit:
        return ref
    return ref[:limit] + "..."
