"""Threshold rules and the ordered policy that evaluates them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from models.records import Observation


class ComparisonMode(str, Enum):
    """Direction of a threshold crossing. Comparisons are strict."""

    lt = "lt"
    gt = "gt"

    def crosses(self, value: float, threshold: float) -> bool:
        if self is ComparisonMode.lt:
            return value < threshold
        return value > threshold


@dataclass(frozen=True)
class AlertRule:
    name: str
    mode: ComparisonMode
    threshold: float
    metric: str = "value"

    def matches(self, observation: Observation) -> bool:
        return self.mode.crosses(getattr(observation, self.metric), self.threshold)


class AlertPolicy:
    """Rules evaluated top to bottom; the first match wins."""

    def __init__(self, rules: Iterable[AlertRule]) -> None:
        self.rules: Tuple[AlertRule, ...] = tuple(rules)
        if not self.rules:
            raise ValueError("An alert policy needs at least one rule.")

    def first_match(self, observation: Observation) -> Optional[AlertRule]:
        for rule in self.rules:
            if rule.matches(observation):
                return rule
        return None


def threshold_policy(name: str, mode: ComparisonMode, threshold: float) -> AlertPolicy:
    return AlertPolicy([AlertRule(name=name, mode=mode, threshold=threshold)])


def funding_policy(
    margin_price: float,
    rate_floor: float,
    take_profit_price: float,
) -> AlertPolicy:
    """Mark price too high, then annualized rate too low, then mark price too low."""
    return AlertPolicy(
        [
            AlertRule("margin", ComparisonMode.gt, margin_price),
            AlertRule("negative", ComparisonMode.lt, rate_floor, metric="annualized_rate"),
            AlertRule("take-profit", ComparisonMode.lt, take_profit_price),
        ]
    )
