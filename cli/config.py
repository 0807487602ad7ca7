from __future__ import annotations

import math
from dataclasses import dataclass

from errors import ArgumentError
from feeds.coin_data import Asset
from services.policy import ComparisonMode


@dataclass(frozen=True)
class PriceMonitorConfig:
    asset: Asset
    mode: ComparisonMode
    threshold: float


def _choices(enum_type) -> str:
    return "|".join(member.value for member in enum_type)


def parse_price_arguments(asset: str, mode: str, threshold: str) -> PriceMonitorConfig:
    """Validate the raw positional arguments of the price command."""
    try:
        parsed_asset = Asset(asset.strip().lower())
    except ValueError as exc:
        raise ArgumentError(
            f"Invalid asset {asset!r}; expected one of {_choices(Asset)}."
        ) from exc

    try:
        parsed_mode = ComparisonMode(mode.strip().lower())
    except ValueError as exc:
        raise ArgumentError(
            f"Invalid comparison mode {mode!r}; expected one of {_choices(ComparisonMode)}."
        ) from exc

    try:
        parsed_threshold = float(threshold)
    except ValueError as exc:
        raise ArgumentError(f"Invalid threshold {threshold!r}; expected a number.") from exc
    if not math.isfinite(parsed_threshold):
        raise ArgumentError(f"Invalid threshold {threshold!r}; expected a finite number.")

    return PriceMonitorConfig(asset=parsed_asset, mode=parsed_mode, threshold=parsed_threshold)
