"""TickDriver — fixed-period asyncio driver for an AdaptiveRateSimulator.

Design notes:
    - One background task per driver; it sleeps for the period, then calls
      the synchronous simulator.tick() on the event loop thread.
    - At most one tick is in flight.  A tick that would overlap an unfinished
      one is skipped, never queued.
    - stop() is idempotent and leaves no task behind; aclose() also waits
      for the cancelled task to finish unwinding.
    - The period is a display-refresh concern.  Any period >= 0 yields the
      same sequence of states for the same mode changes and tick count.
"""

from __future__ import annotations

import asyncio
import logging

from safe_amr.core.simulator import AdaptiveRateSimulator

logger = logging.getLogger(__name__)


class TickDriver:
    """Invokes ``simulator.tick()`` once per *period_seconds*.

    Args:
        simulator: The simulator to advance.
        period_seconds: Delay between ticks.  Must be >= 0.
    """

    def __init__(self, simulator: AdaptiveRateSimulator, period_seconds: float = 0.5) -> None:
        if period_seconds < 0:
            raise ValueError("period_seconds must be >= 0")
        self._simulator = simulator
        self._period = period_seconds
        self._task: asyncio.Task[None] | None = None
        self._stopped_task: asyncio.Task[None] | None = None
        self._ticking = False
        self._skipped = 0

    # ── Lifecycle ────────────────────────────────────────────────────────

    def start(self) -> None:
        """Begin ticking on the running event loop.  No-op if already running."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="amr-tick-driver")
        logger.info("Tick driver started (period=%.3fs)", self._period)

    def stop(self) -> None:
        """Cancel the tick task.  Safe to call when already stopped."""
        task, self._task = self._task, None
        if task is None:
            return
        if not task.done():
            task.cancel()
        self._stopped_task = task
        logger.info("Tick driver stopped at tick %d", self._simulator.tick_count)

    async def aclose(self) -> None:
        """Stop and wait until the tick task has fully unwound."""
        self.stop()
        task, self._stopped_task = self._stopped_task, None
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def period_seconds(self) -> float:
        return self._period

    @property
    def skipped_ticks(self) -> int:
        """Ticks dropped because the previous one had not completed."""
        return self._skipped

    # ── Internals ────────────────────────────────────────────────────────

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._period)
            self.fire()

    def fire(self) -> bool:
        """Run one tick unless another is in flight.  Returns True if it ran."""
        if self._ticking:
            self._skipped += 1
            logger.debug("Skipped overlapping tick")
            return False
        self._ticking = True
        try:
            self._simulator.tick()
        finally:
            self._ticking = False
        return True
