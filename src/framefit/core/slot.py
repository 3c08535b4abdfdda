"""Caller slot: the public analyze()/retry() surface.

A slot represents one place on screen that shows one image at a time. Each
``analyze()`` call supersedes the previous one for the same slot: the older
in-flight task is cancelled, and a generation counter guarantees that its
result is never delivered, even if it completes before the cancellation
lands.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from framefit.core.controller import AnalysisController
from framefit.core.types import AnalysisOutcome

logger = logging.getLogger(__name__)

OutcomeListener = Callable[[AnalysisOutcome], None]


class AnalysisSlot:
    """Delivers only the newest analysis outcome for one caller slot.

    Usage:
        slot = AnalysisSlot(AnalysisController(HttpProber()))
        outcome = await slot.analyze(project.image_url)
        if outcome is not None:  # None means a newer call superseded this one
            render(outcome.policy)

        # later, from a "try again" button
        await slot.retry()
    """

    def __init__(
        self,
        controller: AnalysisController,
        *,
        on_outcome: OutcomeListener | None = None,
    ) -> None:
        """Initialize the slot.

        Args:
            controller: Runs each analysis.
            on_outcome: Optional listener called with every delivered
                outcome (never with superseded ones).
        """
        self._controller = controller
        self._on_outcome = on_outcome
        self._generation = 0
        self._task: asyncio.Task[AnalysisOutcome] | None = None
        self._ref: str = ""
        self._outcome: AnalysisOutcome | None = None

    @property
    def ref(self) -> str:
        """Last-supplied resource reference."""
        return self._ref

    @property
    def outcome(self) -> AnalysisOutcome | None:
        """Most recently delivered outcome."""
        return self._outcome

    @property
    def is_loading(self) -> bool:
        """True while the newest analysis is still running."""
        return self._task is not None and not self._task.done()

    async def analyze(self, ref: str | None) -> AnalysisOutcome | None:
        """Analyze ``ref``, superseding any in-flight analysis for this slot.

        Returns:
            The outcome, or None if a newer ``analyze()`` call superseded
            this one before it finished. Superseded calls never raise.
        """
        self._generation += 1
        generation = self._generation
        self._ref = ref or ""

        previous = self._task
        if previous is not None and not previous.done():
            logger.debug(
                "Superseding in-flight analysis",
                extra={"generation": generation},
            )
            previous.cancel()

        task = asyncio.create_task(self._controller.run(self._ref))
        self._task = task

        try:
            outcome = await task
        except asyncio.CancelledError:
            if generation != self._generation and not _cancel_requested():
                return None
            raise

        if generation != self._generation:
            # Finished after being superseded; drop the late result
            return None

        self._outcome = outcome
        if self._on_outcome is not None:
            self._on_outcome(outcome)
        return outcome

    async def retry(self) -> AnalysisOutcome | None:
        """Re-run ``analyze`` with the last-supplied ref."""
        return await self.analyze(self._ref)

    async def aclose(self) -> None:
        """Cancel any in-flight analysis without delivering it."""
        self._generation += 1
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait([task])


def _cancel_requested() -> bool:
    """True if the current task itself is being cancelled."""
    current = asyncio.current_task()
    return current is not None and current.cancelling() > 0
