"""SimulationSnapshot — an immutable point-in-time view of the AMR simulator.

This is a pure data structure handed to display collaborators.  The derived
fields (labels, sampling bar) are presentation values only; the numeric
contract of the simulator is the interval and the history.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, computed_field

from safe_amr.domain.enums import SeverityMode


class HistorySample(BaseModel):
    """One (tick, interval) point of the windowed history."""

    tick: int = Field(..., ge=1, description="Tick at which the sample was produced")
    interval: float = Field(..., gt=0.0, description="Sampling interval in seconds")

    model_config = {"frozen": True}


class SimulationSnapshot(BaseModel):
    """Immutable observation of a simulator's state after some tick."""

    interval: float = Field(..., gt=0.0, description="Current sampling interval in seconds")
    mode: SeverityMode = Field(..., description="Declared severity mode")
    tick: int = Field(..., ge=0, description="Number of ticks applied so far")
    history: list[HistorySample] = Field(
        default_factory=list,
        description="Most recent samples, oldest first",
    )

    model_config = {"frozen": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def mode_label(self) -> str:
        return self.mode.label

    @computed_field  # type: ignore[prop-decorator]
    @property
    def interval_label(self) -> str:
        """Interval between frames, two decimals, e.g. ``1.50s``."""
        return f"{self.interval:.2f}s"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def sampling_rate_hz(self) -> float:
        return 1.0 / self.interval

    @computed_field  # type: ignore[prop-decorator]
    @property
    def sampling_bar_percent(self) -> float:
        """Width of the sampling-rate bar.

        Proportional to 1 / interval and capped at a full bar; not normalised
        against the configured interval range.
        """
        return min(100.0, 100.0 / self.interval)
