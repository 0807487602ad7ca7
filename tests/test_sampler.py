from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable, Iterator, List

import pytest

from errors import DispatchError
from feeds.coin_data import Asset, CoinPriceFeed
from models.records import FundingObservation, Observation
from services.formatting import format_funding_alert, format_funding_status, format_price_alert
from services.policy import AlertPolicy, AlertRule, ComparisonMode, funding_policy, threshold_policy
from services.rate_limiter import CooldownLimiter
from services.sampler import Sampler, build_price_sampler
from settings import get_settings
from storage.status_cache import NO_DATA, StatusCache


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: List[tuple[str, str]] = []

    def send(self, destination: str, message: str) -> None:
        self.sent.append((destination, message))
        if self.fail:
            raise DispatchError("gateway down")


class ListSource:
    def __init__(self, observations: Iterable[Observation]) -> None:
        self._observations = list(observations)

    def observations(self) -> Iterator[Observation]:
        yield from self._observations


def _price(value: float) -> Observation:
    return Observation(label="BTC", value=value, observed_at=datetime(2024, 1, 1, tzinfo=timezone.utc))


def _funding(price: float, rate: float) -> FundingObservation:
    return FundingObservation(
        label="ETHUSDT",
        value=price,
        observed_at=datetime(2024, 1, 1, 8, 30, 15, tzinfo=timezone.utc),
        funding_rate=rate,
    )


def _price_sampler(clock: FakeClock, notifier: RecordingNotifier, source=None) -> Sampler:
    return Sampler(
        source=source or ListSource([]),
        policy=threshold_policy("BTC", ComparisonMode.lt, 50000.0),
        limiter=CooldownLimiter(cooldown=600.0, clock=clock),
        notifier=notifier,
        destination="13900000000",
        alert_formatter=format_price_alert,
    )


def test_alert_then_cooldown_then_alert_again() -> None:
    clock = FakeClock()
    notifier = RecordingNotifier()
    sampler = _price_sampler(clock, notifier)

    assert sampler.process(_price(49000.0)) is not None
    assert notifier.sent == [("13900000000", "[BTC: 49000.00]")]

    clock.advance(5)
    assert sampler.process(_price(49500.0)) is None
    assert len(notifier.sent) == 1

    clock.advance(695)
    assert sampler.process(_price(49200.0)) is not None
    assert len(notifier.sent) == 2
    assert "49200.00" in notifier.sent[1][1]


def test_cooldown_boundary_is_exclusive() -> None:
    clock = FakeClock()
    notifier = RecordingNotifier()
    sampler = _price_sampler(clock, notifier)

    sampler.process(_price(49000.0))
    clock.advance(600)
    sampler.process(_price(49000.0))
    assert len(notifier.sent) == 1

    clock.advance(1)
    sampler.process(_price(49000.0))
    assert len(notifier.sent) == 2


def test_quiet_eligible_tick_starts_new_window() -> None:
    clock = FakeClock()
    notifier = RecordingNotifier()
    sampler = _price_sampler(clock, notifier)

    assert sampler.process(_price(51000.0)) is None
    assert sampler.limiter.last_sent == clock.now

    clock.advance(10)
    assert sampler.process(_price(49000.0)) is None
    assert notifier.sent == []

    clock.advance(591)
    assert sampler.process(_price(49000.0)) is not None
    assert notifier.sent == [("13900000000", "[BTC: 49000.00]")]


def test_failed_dispatch_still_consumes_cooldown(caplog) -> None:
    clock = FakeClock()
    notifier = RecordingNotifier(fail=True)
    sampler = _price_sampler(clock, notifier)

    with caplog.at_level(logging.ERROR):
        sampler.process(_price(49000.0))

    assert sampler.limiter.last_sent == clock.now
    assert any("Alert dispatch failed" in record.getMessage() for record in caplog.records)

    clock.advance(30)
    sampler.process(_price(48000.0))
    assert len(notifier.sent) == 1

    clock.advance(600)
    sampler.process(_price(48000.0))
    assert len(notifier.sent) == 2


def test_only_highest_priority_message_is_sent() -> None:
    clock = FakeClock()
    notifier = RecordingNotifier()
    policy = AlertPolicy(
        [
            AlertRule("margin", ComparisonMode.gt, 1000.0),
            AlertRule("negative", ComparisonMode.lt, 5.0, metric="annualized_rate"),
            AlertRule("take-profit", ComparisonMode.lt, 9000.0),
        ]
    )
    sampler = Sampler(
        source=ListSource([]),
        policy=policy,
        limiter=CooldownLimiter(cooldown=600.0, clock=clock),
        notifier=notifier,
        destination="13900000000",
        alert_formatter=format_funding_alert,
    )

    rule = sampler.process(_funding(price=6000.0, rate=-0.0001))

    assert rule is not None and rule.name == "margin"
    assert notifier.sent == [("13900000000", "[APY:-22%, price:6000.00, margin]")]


def test_status_cache_updated_on_every_observation() -> None:
    clock = FakeClock()
    notifier = RecordingNotifier()
    cache = StatusCache()
    sampler = Sampler(
        source=ListSource([]),
        policy=funding_policy(margin_price=5000.0, rate_floor=5.0, take_profit_price=3200.0),
        limiter=CooldownLimiter(cooldown=600.0, clock=clock),
        notifier=notifier,
        destination="13900000000",
        alert_formatter=format_funding_alert,
        status_formatter=format_funding_status,
        status_cache=cache,
    )
    assert cache.get() == NO_DATA

    sampler.process(_funding(price=4000.0, rate=0.0001))
    first = cache.get()
    assert first == "08:30:15  APY:22  mark:4000.00  rate:0.0100  symbol:ETHUSDT"

    clock.advance(1)
    sampler.process(_funding(price=4100.5, rate=0.0001))
    assert "mark:4100.50" in cache.get()
    assert notifier.sent == []


def test_run_processes_every_observation_in_order() -> None:
    clock = FakeClock()
    notifier = RecordingNotifier()
    source = ListSource([_price(49000.0), _price(51000.0), _price(48000.0)])
    sampler = _price_sampler(clock, notifier, source=source)
    seen: list[float] = []
    original = sampler.process

    def tracking(observation: Observation):
        seen.append(observation.value)
        return original(observation)

    sampler.process = tracking  # type: ignore[method-assign]
    sampler.run()

    assert seen == [49000.0, 51000.0, 48000.0]
    assert notifier.sent == [("13900000000", "[BTC: 49000.00]")]


def test_start_runs_loop_on_daemon_thread() -> None:
    clock = FakeClock()
    notifier = RecordingNotifier()
    sampler = _price_sampler(clock, notifier, source=ListSource([_price(1.0)]))

    thread = sampler.start()
    thread.join(timeout=5)

    assert thread.daemon is True
    assert not thread.is_alive()
    assert len(notifier.sent) == 1


@pytest.mark.parametrize("value", [50000.0, 60000.0])
def test_no_dispatch_when_condition_false(value: float) -> None:
    clock = FakeClock()
    notifier = RecordingNotifier()
    sampler = _price_sampler(clock, notifier)

    assert sampler.process(_price(value)) is None
    assert notifier.sent == []
    assert sampler.limiter.last_sent == clock.now


def test_build_price_sampler_wires_polling_feed() -> None:
    settings = replace(get_settings(), poll_interval=3.0, alert_cooldown=120.0)

    sampler = build_price_sampler(Asset.sol, ComparisonMode.gt, 200.0, settings=settings)

    assert isinstance(sampler.source, CoinPriceFeed)
    assert sampler.source.asset is Asset.sol
    assert sampler.source.interval == 3.0
    assert sampler.limiter.cooldown == 120.0
    assert sampler.status_cache is None
    rule = sampler.policy.rules[0]
    assert (rule.name, rule.mode, rule.threshold) == ("SOL", ComparisonMode.gt, 200.0)
