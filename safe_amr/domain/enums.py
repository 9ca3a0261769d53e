"""Controlled enumerations for the safe-amr domain.

Every categorical field in the domain MUST reference an enum defined here.
Free-form strings are not acceptable for severity classification.
"""

from __future__ import annotations

from enum import Enum


class SeverityMode(str, Enum):
    """Declared criticality of the monitored scene.

    Governs which recurrence and which clamp bound apply on each tick.
    """

    MODERATE = "moderate"
    CRITICAL = "critical"
    CATASTROPHIC = "catastrophic"

    @property
    def label(self) -> str:
        """Upper-case status label shown next to the live chart."""
        return self.value.upper()

    @property
    def is_urgent(self) -> bool:
        """True for the modes that shrink the sampling interval."""
        return self is not SeverityMode.MODERATE
