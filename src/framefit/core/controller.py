"""Retry/timeout controller for one image analysis.

The controller drives a single analysis through an explicit state machine:

    IDLE --run()--> PROBING --Loaded--> RESOLVED
                       |  \--Failed, attempts left--> (backoff) PROBING
                       |--attempts exhausted--> FALLBACK
                       \--deadline passed------> FALLBACK

Retry mechanics are delegated to tenacity (stop after ``max_attempts``,
exponential wait ``base_delay_ms * 2**attempt``). The deadline is an
``asyncio.timeout`` scope wrapped around the whole retry loop, so it is
measured from the start of ``run()``, never reset by retries, and preempts
a hung probe or a pending backoff sleep.

A CORS rejection is not a transient fault: the same attempt is immediately
reprobed with cross-origin mode disabled, and only the outcome of that
reprobe counts against the retry budget.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
)

from framefit.config import ConfigError, Settings, settings
from framefit.core.classifier import classify
from framefit.core.policy import fallback_policy, rendering_hints, resolve
from framefit.core.types import (
    AnalysisOutcome,
    AnalysisState,
    Error,
    Fallback,
    FallbackReason,
    Resolved,
)
from framefit.probe.exceptions import ProbeError, shorten_ref
from framefit.probe.types import (
    ProbeFailed,
    ProbeFailure,
    ProbeLoaded,
    ProberProtocol,
)
from framefit.utils.logging import get_logger, set_correlation_context

logger = get_logger(__name__)

SleepFn = Callable[[float], Awaitable[None]]
ClockFn = Callable[[], float]


@dataclass(frozen=True)
class AnalysisConfig:
    """Numeric policy for one analysis.

    Attributes:
        max_attempts: Probe attempts before falling back (CORS reprobes
            excluded).
        deadline_ms: Hard wall-clock ceiling measured from ``run()``.
        base_delay_ms: Backoff base; the delay after the n-th failure is
            ``base_delay_ms * 2**n``.
        target_width: Width of the 16:9 render frame.
    """

    max_attempts: int = 3
    deadline_ms: int = 15000
    base_delay_ms: int = 1000
    target_width: int = 375

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigError("max_attempts", "must be >= 1")
        if self.deadline_ms <= 0:
            raise ConfigError("deadline_ms", "must be > 0")
        if self.base_delay_ms < 0:
            raise ConfigError("base_delay_ms", "must be >= 0")
        if self.target_width <= 0:
            raise ConfigError("target_width", "must be > 0")

    def backoff_ms(self, attempt: int) -> int:
        """Delay before the next probe once ``attempt`` probes have failed."""
        return self.base_delay_ms * 2**attempt

    @property
    def worst_case_backoff_ms(self) -> int:
        """Total sleep time if every attempt fails."""
        return sum(self.backoff_ms(n) for n in range(1, self.max_attempts))

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> AnalysisConfig:
        """Build from Settings, rejecting backoffs that cannot fit the deadline.

        Raises:
            ConfigError: If a value is out of range, or if the worst-case
                backoff alone would consume the whole deadline.
        """
        config = config or settings
        analysis_config = cls(
            max_attempts=config.PROBE_MAX_ATTEMPTS,
            deadline_ms=config.PROBE_DEADLINE_MS,
            base_delay_ms=config.PROBE_BASE_DELAY_MS,
            target_width=config.TARGET_WIDTH,
        )
        return analysis_config.check_backoff_fits_deadline(
            "PROBE_BASE_DELAY_MS", "PROBE_DEADLINE_MS"
        )

    def check_backoff_fits_deadline(
        self,
        delay_key: str = "base_delay_ms",
        deadline_key: str = "deadline_ms",
    ) -> AnalysisConfig:
        """Return self, or raise if the worst-case backoff eats the deadline.

        Args:
            delay_key: Name reported for the backoff base in the error.
            deadline_key: Name reported for the deadline in the error.

        Raises:
            ConfigError: If the total backoff is at least the deadline.
        """
        if self.worst_case_backoff_ms >= self.deadline_ms:
            raise ConfigError(
                delay_key,
                f"worst-case backoff {self.worst_case_backoff_ms}ms "
                f"does not fit inside {deadline_key}={self.deadline_ms}",
            )
        return self


@dataclass
class RetryState:
    """Mutable state of one analysis, owned by a single ``run()`` call.

    Attributes:
        max_attempts: Attempt budget.
        deadline_ms: Wall-clock ceiling.
        attempt: Failed probe attempts so far (CORS reprobes excluded).
        probes_started: Budgeted attempts started, including one in flight.
        elapsed_ms: Time since ``run()`` started, updated at each transition.
        cors_fallbacks: Immediate cross-origin-disabled reprobes issued.
        state: Current state machine position.
    """

    max_attempts: int
    deadline_ms: int
    attempt: int = 0
    probes_started: int = 0
    elapsed_ms: int = 0
    cors_fallbacks: int = 0
    state: AnalysisState = AnalysisState.IDLE
    started_at: float = field(default=0.0, repr=False)


class AnalysisController:
    """Runs probe -> classify -> resolve with bounded retry and a deadline.

    The controller holds no state between invocations: each ``run()`` call
    creates and owns its own RetryState, so several analyses can run
    concurrently on one controller.

    Usage:
        controller = AnalysisController(HttpProber())
        outcome = await controller.run("https://example.com/hero.jpg")
        outcome.policy  # always present
    """

    def __init__(
        self,
        prober: ProberProtocol,
        config: AnalysisConfig | None = None,
        *,
        sleep: SleepFn = asyncio.sleep,
        clock: ClockFn = time.monotonic,
    ) -> None:
        """Initialize the controller.

        Args:
            prober: Implementation of the load-and-measure capability.
            config: Numeric policy (defaults to AnalysisConfig()).
            sleep: Backoff sleep, injectable for tests.
            clock: Monotonic clock in seconds, used for elapsed_ms.
        """
        self._prober = prober
        self._config = config or AnalysisConfig()
        self._sleep = sleep
        self._clock = clock

    @property
    def config(self) -> AnalysisConfig:
        return self._config

    async def run(self, ref: str | None) -> AnalysisOutcome:
        """Analyze ``ref`` and always return an outcome carrying a policy.

        Probe failures never raise; cancellation does propagate.
        """
        ref = ref or ""
        state = RetryState(
            max_attempts=self._config.max_attempts,
            deadline_ms=self._config.deadline_ms,
            started_at=self._clock(),
        )
        set_correlation_context(
            analysis_id=uuid.uuid4().hex[:12],
            ref=shorten_ref(ref),
        )

        if not ref.strip():
            logger.debug("No resource supplied, using fallback policy")
            return self._fallback(ref, state, FallbackReason.EMPTY_REF)

        state.state = AnalysisState.PROBING
        logger.info("Starting analysis", max_attempts=state.max_attempts)

        deadline = asyncio.timeout(self._config.deadline_ms / 1000)
        try:
            async with deadline:
                loaded = await self._retrying(state)(self._attempt, ref, state)
        except ProbeError as e:
            logger.warning("Retries exhausted", attempts=state.attempt, error=str(e))
            return self._fallback(ref, state, FallbackReason.RETRIES_EXHAUSTED)
        except TimeoutError as e:
            if deadline.expired():
                logger.warning(
                    "Analysis deadline exceeded",
                    deadline_ms=state.deadline_ms,
                    attempts=state.attempt,
                )
                return self._fallback(ref, state, FallbackReason.DEADLINE_EXCEEDED)
            return self._error(ref, state, e)
        except Exception as e:
            return self._error(ref, state, e)

        return self._resolved(ref, state, loaded)

    def _retrying(self, state: RetryState) -> AsyncRetrying:
        def log_backoff(retry_state: RetryCallState) -> None:
            delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
            logger.info(
                "Retrying probe",
                attempt=state.attempt,
                max_attempts=state.max_attempts,
                retry_delay_s=round(delay, 3),
            )

        return AsyncRetrying(
            retry=retry_if_exception_type(ProbeError),
            stop=stop_after_attempt(self._config.max_attempts),
            wait=self._backoff,
            sleep=self._sleep,
            before_sleep=log_backoff,
            reraise=True,
        )

    def _backoff(self, retry_state: RetryCallState) -> float:
        return self._config.backoff_ms(retry_state.attempt_number) / 1000

    async def _attempt(self, ref: str, state: RetryState) -> ProbeLoaded:
        """One budgeted attempt, including the attempt-exempt CORS reprobe."""
        state.probes_started += 1
        set_correlation_context(attempt=state.probes_started)
        result = await self._prober.probe(ref, True)

        if isinstance(result, ProbeFailed) and result.reason is ProbeFailure.CORS_ERROR:
            state.cors_fallbacks += 1
            logger.info("Cross-origin access rejected, reprobing without it")
            result = await self._prober.probe(ref, False)

        state.elapsed_ms = self._elapsed_ms(state)
        if isinstance(result, ProbeLoaded):
            return result
        if not isinstance(result, ProbeFailed):
            raise TypeError(
                f"Prober returned {type(result).__name__}, not a ProbeResult"
            )

        state.attempt += 1
        logger.warning(
            "Probe attempt failed",
            reason=result.reason.value,
            detail=result.detail,
            attempt=state.attempt,
        )
        raise ProbeError.from_result(result, ref)

    def _elapsed_ms(self, state: RetryState) -> int:
        return int((self._clock() - state.started_at) * 1000)

    def _finish(self, state: RetryState, terminal: AnalysisState) -> None:
        if state.state.is_terminal:
            raise RuntimeError(
                f"Analysis already finished as {state.state.value}, "
                f"cannot move to {terminal.value}"
            )
        state.state = terminal
        state.elapsed_ms = self._elapsed_ms(state)

    def _resolved(self, ref: str, state: RetryState, loaded: ProbeLoaded) -> Resolved:
        self._finish(state, AnalysisState.RESOLVED)
        classification = classify(loaded.width, loaded.height)
        policy = resolve(classification, target_width=self._config.target_width)
        logger.info(
            "Analysis resolved",
            width=loaded.width,
            height=loaded.height,
            aspect_ratio=round(classification.aspect_ratio, 3),
            family=classification.family.value,
            quality=classification.quality_tier.value,
            optimized=policy.optimized,
            elapsed_ms=state.elapsed_ms,
        )
        return Resolved(
            ref=ref,
            classification=classification,
            policy=policy,
            hints=rendering_hints(classification),
            attempts=state.probes_started,
            elapsed_ms=state.elapsed_ms,
        )

    def _fallback(
        self,
        ref: str,
        state: RetryState,
        reason: FallbackReason,
    ) -> Fallback:
        self._finish(state, AnalysisState.FALLBACK)
        return Fallback(
            ref=ref,
            policy=fallback_policy(self._config.target_width),
            hints=rendering_hints(None),
            reason=reason,
            attempts=state.probes_started,
            elapsed_ms=state.elapsed_ms,
        )

    def _error(self, ref: str, state: RetryState, error: Exception) -> Error:
        logger.exception("Prober raised instead of reporting a result")
        self._finish(state, AnalysisState.ERROR)
        return Error(
            ref=ref,
            reason=f"{type(error).__name__}: {error}",
            policy=fallback_policy(self._config.target_width),
            hints=rendering_hints(None),
            attempts=state.probes_started,
            elapsed_ms=state.elapsed_ms,
        )
