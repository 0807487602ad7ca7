"""Sampling loop that ties a feed to the alert policy and the notifier."""

from __future__ import annotations

import logging
import threading
from functools import lru_cache
from typing import Any, Callable, Iterator, Optional, Protocol

from errors import DispatchError
from feeds.coin_data import Asset, CoinPriceFeed
from feeds.mark_price import MarkPriceStream
from models.records import Observation
from services.formatting import (
    format_funding_alert,
    format_funding_status,
    format_price_alert,
)
from services.notifier import Notifier, SmsNotifier
from services.policy import (
    AlertPolicy,
    AlertRule,
    ComparisonMode,
    funding_policy,
    threshold_policy,
)
from services.rate_limiter import CooldownLimiter
from settings import Settings, get_settings
from storage.status_cache import StatusCache, build_default_status_cache

logger = logging.getLogger(__name__)

AlertFormatter = Callable[[Any, AlertRule], str]
StatusFormatter = Callable[[Any], str]


class ValueSource(Protocol):
    def observations(self) -> Iterator[Observation]:
        ...


class Sampler:
    """Owns the alert state for one monitored value.

    The rate limiter and optional status cache live here instead of in
    module globals; the status page reads the same cache instance.
    """

    def __init__(
        self,
        source: ValueSource,
        policy: AlertPolicy,
        limiter: CooldownLimiter,
        notifier: Notifier,
        destination: str,
        alert_formatter: AlertFormatter,
        status_formatter: Optional[StatusFormatter] = None,
        status_cache: Optional[StatusCache] = None,
    ) -> None:
        self.source = source
        self.policy = policy
        self.limiter = limiter
        self.notifier = notifier
        self.destination = destination
        self.alert_formatter = alert_formatter
        self.status_formatter = status_formatter
        self.status_cache = status_cache

    def process(self, observation: Observation) -> Optional[AlertRule]:
        """Handle one observation; return the rule that was dispatched, if any."""
        if self.status_cache is not None and self.status_formatter is not None:
            snapshot = self.status_formatter(observation)
            self.status_cache.set(snapshot)
            logger.info(snapshot)
        else:
            logger.info(
                "Observed %s", observation.value, extra={"symbol": observation.label}
            )

        now = self.limiter.now()
        if not self.limiter.ready(now):
            return None
        # Every tick past the cooldown starts a new window, whether or not a
        # rule matches. A failed send therefore also suppresses alerts until
        # the window elapses.
        self.limiter.mark(now)

        rule = self.policy.first_match(observation)
        if rule is None:
            return None

        message = self.alert_formatter(observation, rule)
        logger.info(
            "Threshold crossed: %s",
            message,
            extra={
                "symbol": observation.label,
                "rule": rule.name,
                "mode": rule.mode.value,
                "threshold": rule.threshold,
            },
        )
        try:
            self.notifier.send(self.destination, message)
        except DispatchError as exc:
            logger.error(
                "Alert dispatch failed: %s",
                exc,
                extra={"destination": self.destination, "rule": rule.name},
            )
        return rule

    def run(self) -> None:
        for observation in self.source.observations():
            self.process(observation)

    def start(self) -> threading.Thread:
        thread = threading.Thread(target=self.run, name="sampler", daemon=True)
        thread.start()
        return thread


def build_notifier(settings: Settings) -> SmsNotifier:
    return SmsNotifier(
        url=settings.sms_gateway_url,
        app_id=settings.sms_app_id,
        signature=settings.sms_signature,
        timeout=settings.http_timeout,
    )


def build_price_sampler(
    asset: Asset,
    mode: ComparisonMode,
    threshold: float,
    settings: Optional[Settings] = None,
) -> Sampler:
    """Wire the polling price monitor for one asset and one threshold."""
    settings = settings or get_settings()
    feed = CoinPriceFeed(
        asset=asset,
        url=settings.coin_data_url,
        interval=settings.poll_interval,
        timeout=settings.http_timeout,
    )
    return Sampler(
        source=feed,
        policy=threshold_policy(asset.display_name, mode, threshold),
        limiter=CooldownLimiter(cooldown=settings.alert_cooldown),
        notifier=build_notifier(settings),
        destination=settings.sms_destination,
        alert_formatter=format_price_alert,
    )


@lru_cache
def build_default_funding_sampler() -> Sampler:
    """Wire the streaming funding monitor against the shared status cache."""
    settings = get_settings()
    stream = MarkPriceStream(
        symbol=settings.funding_symbol,
        url_template=settings.stream_url_template,
        reconnect_delay=settings.reconnect_delay,
    )
    return Sampler(
        source=stream,
        policy=funding_policy(
            margin_price=settings.funding_margin_price,
            rate_floor=settings.funding_rate_threshold,
            take_profit_price=settings.funding_take_profit_price,
        ),
        limiter=CooldownLimiter(cooldown=settings.alert_cooldown),
        notifier=build_notifier(settings),
        destination=settings.sms_destination,
        alert_formatter=format_funding_alert,
        status_formatter=format_funding_status,
        status_cache=build_default_status_cache(),
    )
