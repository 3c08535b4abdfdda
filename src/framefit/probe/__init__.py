"""Resource probing layer for framefit.

Key Components:
    - ProberProtocol: the "load and report dimensions" capability
    - ProbeLoaded / ProbeFailed: single-attempt results
    - ProbeError hierarchy: failures as exceptions for the retry loop
    - HttpProber: default httpx + Pillow implementation

Example:
    from framefit.probe import HttpProber

    result = await HttpProber().probe("https://example.com/a.jpg", True)
"""

from framefit.probe.exceptions import (
    CorsProbeError,
    InvalidDimensionsError,
    NetworkProbeError,
    ProbeError,
)
from framefit.probe.http import SUPPORTED_SCHEMES, HttpProber
from framefit.probe.types import (
    ProbeFailed,
    ProbeFailure,
    ProbeLoaded,
    ProberProtocol,
    ProbeResult,
)

__all__ = [
    "SUPPORTED_SCHEMES",
    "CorsProbeError",
    "HttpProber",
    "InvalidDimensionsError",
    "NetworkProbeError",
    "ProbeError",
    "ProbeFailed",
    "ProbeFailure",
    "ProbeLoaded",
    "ProbeResult",
    "ProberProtocol",
]
