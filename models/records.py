"""Domain models shared across feeds and services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

FUNDING_PERIODS_PER_DAY = 6
DAYS_PER_YEAR = 365


@dataclass(frozen=True, slots=True)
class Observation:
    """A single sampled value with the label it was sampled for."""

    label: str
    value: float
    observed_at: datetime


@dataclass(frozen=True, slots=True)
class FundingObservation(Observation):
    """Mark price update; ``value`` holds the mark price."""

    funding_rate: float = 0.0
    settlement_time: datetime | None = None

    @property
    def mark_price(self) -> float:
        return self.value

    @property
    def rate_percent(self) -> float:
        return self.funding_rate * 100

    @property
    def annualized_rate(self) -> float:
        """Funding rate in percent, extrapolated over a year."""
        return self.rate_percent * FUNDING_PERIODS_PER_DAY * DAYS_PER_YEAR
