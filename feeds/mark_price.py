"""Streaming mark price / funding rate feed over a websocket."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Optional

from pydantic import ValidationError
from websockets.exceptions import WebSocketException
from websockets.sync.client import connect as ws_connect

from errors import DecodeError, ParseError, StreamConnectionError
from feeds.schemas import MarkPriceUpdate
from models.records import FundingObservation

logger = logging.getLogger(__name__)


def _from_millis(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


class MarkPriceStream:
    """Reads ``<symbol>@markPrice`` events and reconnects forever on failure.

    Every connection attempt, including the first, waits ``reconnect_delay``
    seconds. The delay never grows and there is no retry limit.
    """

    def __init__(
        self,
        symbol: str,
        url_template: str,
        reconnect_delay: float = 5.0,
        connector: Optional[Callable[[str], Any]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.symbol = symbol.lower()
        self.url = url_template.format(symbol=self.symbol)
        self.reconnect_delay = reconnect_delay
        self._connector = connector or ws_connect
        self._sleep = sleep

    def connect(self) -> Any:
        try:
            return self._connector(self.url)
        except (WebSocketException, OSError) as exc:
            raise StreamConnectionError(f"Could not connect to {self.url}: {exc}") from exc

    @staticmethod
    def decode(message: str | bytes) -> FundingObservation:
        try:
            update = MarkPriceUpdate.model_validate_json(message)
        except ValidationError as exc:
            raise DecodeError(f"Malformed mark price message: {exc}") from exc

        try:
            mark_price = float(update.mark_price)
            funding_rate = float(update.funding_rate)
        except ValueError as exc:
            raise ParseError(
                f"Non-numeric price {update.mark_price!r} or rate {update.funding_rate!r}."
            ) from exc

        try:
            observed_at = _from_millis(update.event_time)
            settlement_time = (
                _from_millis(update.settlement_time) if update.settlement_time else None
            )
        except (OverflowError, OSError, ValueError) as exc:
            raise ParseError(
                f"Timestamp out of range: E={update.event_time} T={update.settlement_time}."
            ) from exc

        return FundingObservation(
            label=update.symbol,
            value=mark_price,
            observed_at=observed_at,
            funding_rate=funding_rate,
            settlement_time=settlement_time,
        )

    def observations(self) -> Iterator[FundingObservation]:
        while True:
            self._sleep(self.reconnect_delay)
            try:
                connection = self.connect()
            except StreamConnectionError as exc:
                logger.warning(
                    "Connection failed, retrying: %s",
                    exc,
                    extra={"symbol": self.symbol, "delay_s": self.reconnect_delay},
                )
                continue

            logger.info("Connected to %s", self.url, extra={"symbol": self.symbol})
            try:
                yield from self._drain(connection)
            finally:
                connection.close()

    def _drain(self, connection: Any) -> Iterator[FundingObservation]:
        while True:
            try:
                message = connection.recv()
            except (WebSocketException, OSError) as exc:
                logger.warning(
                    "Stream read failed, reconnecting: %s",
                    exc,
                    extra={"symbol": self.symbol, "delay_s": self.reconnect_delay},
                )
                return

            try:
                observation = self.decode(message)
            except DecodeError as exc:
                logger.warning(
                    "Dropping message: %s",
                    exc,
                    extra={"symbol": self.symbol, "reason": type(exc).__name__},
                )
                continue
            yield observation
