"""Fixed resource-comparison figures from the paper's cloud economics table.

These numbers are display content, not measurements: the service only hands
them to the chart that compares a fixed-rate deployment against SAFE.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, computed_field


class ResourceUsage(BaseModel):
    """Resource consumption of one monitoring strategy."""

    name: str = Field(..., min_length=1)
    vcpu_seconds: int = Field(..., ge=0, description="vCPU-seconds consumed (lower is better)")
    frames: int = Field(..., ge=0, description="Frames processed during the run")

    model_config = {"frozen": True}


class ResourceComparison(BaseModel):
    """Fixed-rate baseline versus adaptive monitoring."""

    baseline: ResourceUsage
    adaptive: ResourceUsage

    model_config = {"frozen": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def vcpu_savings_percent(self) -> float:
        """Relative vCPU reduction of the adaptive run against the baseline."""
        if self.baseline.vcpu_seconds == 0:
            return 0.0
        saved = self.baseline.vcpu_seconds - self.adaptive.vcpu_seconds
        return round(saved / self.baseline.vcpu_seconds * 100.0, 2)


RESOURCE_COMPARISON = ResourceComparison(
    baseline=ResourceUsage(name="Fixed-Rate", vcpu_seconds=245998, frames=3428),
    adaptive=ResourceUsage(name="SAFE (Adaptive)", vcpu_seconds=58967, frames=3540),
)
