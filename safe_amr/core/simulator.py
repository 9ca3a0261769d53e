"""AdaptiveRateSimulator — the live AMR state machine.

The simulator owns one sampling interval, a declared severity mode, a tick
counter and a fixed-size window of recent samples.  Two independent events
move it:

    - set_mode():  replaces the mode immediately; nothing else changes.
    - tick():      applies the recurrence for the *current* mode, then
                   records the new sample.

There is no terminal state.  The machine runs until its owner stops driving
it.  Each instance owns its state exclusively, so any number of simulators
can coexist in one process.

Thread-safety note:
    A simulator is mutated only from the event loop that drives it.
    It is not itself locked.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable

from safe_amr.core.recurrence import DEFAULT_CONFIG, SimulatorConfig, next_interval
from safe_amr.domain.enums import SeverityMode
from safe_amr.domain.snapshot import HistorySample, SimulationSnapshot

logger = logging.getLogger(__name__)

SnapshotObserver = Callable[[SimulationSnapshot], None]


class InvalidModeError(ValueError):
    """Raised when a caller passes something that is not a SeverityMode."""

    def __init__(self, value: object) -> None:
        self.value = value
        allowed = ", ".join(m.value for m in SeverityMode)
        super().__init__(f"Unknown severity mode {value!r} (expected one of: {allowed})")


def coerce_mode(value: SeverityMode | str) -> SeverityMode:
    """Return *value* as a SeverityMode, rejecting anything outside the enum."""
    if isinstance(value, SeverityMode):
        return value
    try:
        return SeverityMode(value)
    except ValueError:
        raise InvalidModeError(value) from None


class AdaptiveRateSimulator:
    """Maintains and advances the simulation state.

    Args:
        config: Rates, bounds and window size.  Defaults to the paper's values.
        initial_interval: Overrides ``config.initial_interval``; must lie
            within ``[config.min_interval, config.max_interval]``.
    """

    __slots__ = ("_config", "_interval", "_tick", "_mode", "_history", "_observers")

    def __init__(
        self,
        config: SimulatorConfig | None = None,
        initial_interval: float | None = None,
    ) -> None:
        self._config = config or DEFAULT_CONFIG
        interval = self._config.initial_interval if initial_interval is None else initial_interval
        if not self._config.min_interval <= interval <= self._config.max_interval:
            raise ValueError(
                f"initial_interval {interval} outside "
                f"[{self._config.min_interval}, {self._config.max_interval}]"
            )
        self._interval: float = interval
        self._tick: int = 0
        self._mode: SeverityMode = SeverityMode.MODERATE
        self._history: deque[HistorySample] = deque(maxlen=self._config.history_window)
        self._observers: list[SnapshotObserver] = []

    # ── Mutation ─────────────────────────────────────────────────────────

    def set_mode(self, mode: SeverityMode | str) -> None:
        """Declare a new severity mode.  Takes effect on the next tick."""
        new_mode = coerce_mode(mode)
        if new_mode is not self._mode:
            logger.info("Severity mode %s → %s at tick %d", self._mode.value, new_mode.value, self._tick)
        self._mode = new_mode

    def tick(self) -> SimulationSnapshot:
        """Advance one step, record the sample and notify observers."""
        new_interval = next_interval(self._interval, self._mode, self._config)
        self._tick += 1
        # deque(maxlen) evicts the oldest sample before appending
        self._history.append(HistorySample(tick=self._tick, interval=new_interval))
        self._interval = new_interval
        logger.debug("Tick %d [%s] interval=%.4f", self._tick, self._mode.value, new_interval)

        snapshot = self.snapshot()
        self._notify(snapshot)
        return snapshot

    def advance(self, ticks: int) -> SimulationSnapshot:
        """Apply *ticks* consecutive steps and return the final snapshot."""
        if ticks < 0:
            raise ValueError("ticks must be non-negative")
        for _ in range(ticks):
            self.tick()
        return self.snapshot()

    # ── Observers ────────────────────────────────────────────────────────

    def subscribe(self, observer: SnapshotObserver) -> Callable[[], None]:
        """Register *observer* to receive a snapshot after every tick.

        Returns a callable that removes the registration.  Calling it more
        than once is harmless.
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self, snapshot: SimulationSnapshot) -> None:
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception as exc:
                logger.error("Snapshot observer %r failed: %s", observer, exc, exc_info=True)

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def config(self) -> SimulatorConfig:
        return self._config

    @property
    def mode(self) -> SeverityMode:
        return self._mode

    @property
    def current_interval(self) -> float:
        return self._interval

    @property
    def tick_count(self) -> int:
        return self._tick

    @property
    def history(self) -> list[HistorySample]:
        """Read-only copy of the windowed history, oldest first."""
        return list(self._history)

    def snapshot(self) -> SimulationSnapshot:
        """Current state as an immutable snapshot.  Mutates nothing."""
        return SimulationSnapshot(
            interval=self._interval,
            mode=self._mode,
            tick=self._tick,
            history=list(self._history),
        )

    # ── Dunder ───────────────────────────────────────────────────────────

    def __repr__(self) -> str:
        return (
            f"AdaptiveRateSimulator(mode={self._mode.value}, "
            f"tick={self._tick}, "
            f"interval={self._interval:.4f})"
        )
