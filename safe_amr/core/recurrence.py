"""Interval recurrence — the adaptive monitoring rate step function.

Design principles:
    1. Pure function: accepts an interval and a mode, returns the next interval.
    2. No side effects, no state mutation, no I/O.
    3. All rates and bounds are explicit and configurable.

Recurrence:
    catastrophic:  I' = max(I * e^decay_rate, min_interval)
    critical:      I' = max(I * e^decay_rate, critical_floor)
    moderate:      I' = min(I * e^growth_rate, max_interval)

    The interval evolves geometrically per tick, so it converges smoothly
    toward the active bound and saturates there once the clamp engages.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from safe_amr.domain.enums import SeverityMode


@dataclass(frozen=True)
class SimulatorConfig:
    """Configurable constants for the AMR simulator."""

    min_interval: float = 0.5
    max_interval: float = 2.5
    # Per-tick log-rate while an urgent mode is declared (interval shrinks)
    decay_rate: float = -0.0953
    # Per-tick log-rate while moderate (interval grows, saves cost)
    growth_rate: float = 0.0953
    initial_interval: float = 1.5
    # Critical events do not warrant the full catastrophic sampling frequency
    critical_floor: float = 1.0
    history_window: int = 30

    def __post_init__(self) -> None:
        if not 0.0 < self.min_interval <= self.critical_floor <= self.max_interval:
            raise ValueError(
                "interval bounds must satisfy 0 < min_interval <= critical_floor <= max_interval"
            )
        if not self.min_interval <= self.initial_interval <= self.max_interval:
            raise ValueError("initial_interval must lie within [min_interval, max_interval]")
        if self.history_window < 1:
            raise ValueError("history_window must be at least 1")

    def floor_for(self, mode: SeverityMode) -> float:
        """Lower clamp bound applied while *mode* is declared."""
        if mode is SeverityMode.CRITICAL:
            return self.critical_floor
        return self.min_interval


DEFAULT_CONFIG = SimulatorConfig()


def next_interval(
    interval: float,
    mode: SeverityMode,
    config: SimulatorConfig = DEFAULT_CONFIG,
) -> float:
    """Apply one recurrence step for *mode* and clamp to the mode's bound."""
    if mode is SeverityMode.MODERATE:
        return min(interval * math.exp(config.growth_rate), config.max_interval)
    return max(interval * math.exp(config.decay_rate), config.floor_for(mode))
