"""Polling price feed backed by the coin-data list endpoint."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Iterator, Optional

import httpx
from pydantic import ValidationError

from errors import DecodeError, FetchError, MonitorError, NotFoundError, ParseError
from feeds.schemas import CoinDataResponse
from models.records import Observation

logger = logging.getLogger(__name__)


class Asset(str, Enum):
    """Assets the price monitor knows how to look up."""

    btc = "btc"
    eth = "eth"
    sol = "sol"

    @property
    def instrument_id(self) -> str:
        return f"{self.value.upper()}USDT"

    @property
    def display_name(self) -> str:
        return self.value.upper()


class CoinPriceFeed:
    """Fetches the latest price for one asset on a fixed interval."""

    def __init__(
        self,
        asset: Asset,
        url: str,
        interval: float = 10.0,
        client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.asset = asset
        self.url = url
        self.interval = interval
        self._client = client or httpx.Client(timeout=timeout)
        self._sleep = sleep

    def fetch(self) -> Observation:
        """Return the current price of the configured asset."""
        try:
            response = self._client.get(self.url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise FetchError(f"Request to {self.url} failed: {exc}") from exc

        try:
            payload = CoinDataResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise DecodeError(f"Malformed coin data response: {exc}") from exc

        instrument = self.asset.instrument_id
        for record in payload.data:
            if record.coin_id != instrument:
                continue
            try:
                value = float(record.standard_price)
            except ValueError as exc:
                raise ParseError(
                    f"Price {record.standard_price!r} for {instrument} is not numeric."
                ) from exc
            return Observation(
                label=self.asset.display_name,
                value=value,
                observed_at=datetime.now(timezone.utc),
            )

        raise NotFoundError(f"No record for {instrument} in coin data response.")

    def observations(self) -> Iterator[Observation]:
        """Yield one observation per interval, skipping ticks that fail."""
        while True:
            self._sleep(self.interval)
            try:
                observation = self.fetch()
            except MonitorError as exc:
                logger.warning(
                    "Skipping tick: %s",
                    exc,
                    extra={"asset": self.asset.value, "reason": type(exc).__name__},
                )
                continue
            yield observation
