"""Human-readable renderings of observations and alerts."""

from __future__ import annotations

from models.records import FundingObservation, Observation
from services.policy import AlertRule


def format_price_alert(observation: Observation, rule: AlertRule) -> str:
    return f"[{observation.label}: {observation.value:.2f}]"


def format_funding_alert(observation: FundingObservation, rule: AlertRule) -> str:
    return (
        f"[APY:{observation.annualized_rate:.0f}%, "
        f"price:{observation.mark_price:.2f}, {rule.name}]"
    )


def format_funding_status(observation: FundingObservation) -> str:
    return (
        f"{observation.observed_at:%H:%M:%S}  "
        f"APY:{observation.annualized_rate:.0f}  "
        f"mark:{observation.mark_price:.2f}  "
        f"rate:{observation.rate_percent:.4f}  "
        f"symbol:{observation.label}"
    )
