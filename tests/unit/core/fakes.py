"""Fake probers shared by controller and slot tests."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from framefit.probe.types import ProbeFailed, ProbeFailure, ProbeLoaded, ProbeResult

NETWORK_FAILURE = ProbeFailed(ProbeFailure.NETWORK_ERROR, "connection refused")
CORS_FAILURE = ProbeFailed(ProbeFailure.CORS_ERROR, "no ACAO header")
INVALID_FAILURE = ProbeFailed(ProbeFailure.INVALID_DIMENSIONS, "0x0")


class ScriptedProber:
    """Returns scripted results in order; the last one repeats forever."""

    def __init__(self, results: Sequence[ProbeResult]) -> None:
        self._results = list(results)
        self.calls: list[tuple[str, bool]] = []

    async def probe(self, ref: str, allow_cross_origin: bool) -> ProbeResult:
        self.calls.append((ref, allow_cross_origin))
        if len(self._results) > 1:
            return self._results.pop(0)
        return self._results[0]


class CorsOnlyProber:
    """Rejects cross-origin probes, then returns ``fallback`` without CORS."""

    def __init__(self, fallback: ProbeResult) -> None:
        self._fallback = fallback
        self.calls: list[tuple[str, bool]] = []

    async def probe(self, ref: str, allow_cross_origin: bool) -> ProbeResult:
        self.calls.append((ref, allow_cross_origin))
        if allow_cross_origin:
            return CORS_FAILURE
        return self._fallback


class HangingProber:
    """Never returns until cancelled."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, bool]] = []
        self.cancelled = False

    async def probe(self, ref: str, allow_cross_origin: bool) -> ProbeResult:
        self.calls.append((ref, allow_cross_origin))
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        raise AssertionError("unreachable")


class GatedProber:
    """Blocks each ref until the test releases it; dimensions keyed by ref."""

    def __init__(self, sizes: dict[str, tuple[int, int]]) -> None:
        self._sizes = sizes
        self.gates: dict[str, asyncio.Event] = {ref: asyncio.Event() for ref in sizes}
        self.started: dict[str, asyncio.Event] = {ref: asyncio.Event() for ref in sizes}
        self.calls: list[tuple[str, bool]] = []

    def release(self, ref: str) -> None:
        self.gates[ref].set()

    async def probe(self, ref: str, allow_cross_origin: bool) -> ProbeResult:
        self.calls.append((ref, allow_cross_origin))
        self.started[ref].set()
        await self.gates[ref].wait()
        width, height = self._sizes[ref]
        return ProbeLoaded(width=width, height=height)


class RaisingProber:
    """Breaks the prober contract by raising."""

    def __init__(self, error: Exception) -> None:
        self._error = error
        self.calls = 0

    async def probe(self, ref: str, allow_cross_origin: bool) -> ProbeResult:
        self.calls += 1
        raise self._error


class SleepRecorder:
    """Stand-in for asyncio.sleep that records delays and returns at once."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
