from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_COIN_DATA_URL_ENV = "COIN_DATA_URL"
_STREAM_URL_ENV = "MARK_PRICE_STREAM_URL"
_FUNDING_SYMBOL_ENV = "FUNDING_SYMBOL"
_POLL_INTERVAL_ENV = "POLL_INTERVAL_SECONDS"
_RECONNECT_DELAY_ENV = "RECONNECT_DELAY_SECONDS"
_COOLDOWN_ENV = "ALERT_COOLDOWN_SECONDS"
_RATE_THRESHOLD_ENV = "FUNDING_RATE_THRESHOLD"
_MARGIN_PRICE_ENV = "FUNDING_MARGIN_PRICE"
_TAKE_PROFIT_PRICE_ENV = "FUNDING_TAKE_PROFIT_PRICE"
_STATUS_HOST_ENV = "STATUS_HOST"
_STATUS_PORT_ENV = "STATUS_PORT"
_SMS_GATEWAY_URL_ENV = "SMS_GATEWAY_URL"
_SMS_APP_ID_ENV = "SMS_APP_ID"
_SMS_SIGNATURE_ENV = "SMS_SIGNATURE"
_SMS_DESTINATION_ENV = "SMS_DESTINATION"
_HTTP_TIMEOUT_ENV = "HTTP_TIMEOUT_SECONDS"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    coin_data_url: str
    stream_url_template: str
    funding_symbol: str
    poll_interval: float
    reconnect_delay: float
    alert_cooldown: float
    funding_rate_threshold: float
    funding_margin_price: float
    funding_take_profit_price: float
    status_host: str
    status_port: int
    sms_gateway_url: str
    sms_app_id: str
    sms_signature: str
    sms_destination: str
    http_timeout: float
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_float_env(name: str, default: float, *, positive: bool = False) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    if positive and parsed <= 0:
        return default
    return parsed


def _read_port(default: int) -> int:
    value = os.getenv(_STATUS_PORT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if 0 < parsed < 65536 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        coin_data_url=_read_str_env(
            _COIN_DATA_URL_ENV, "https://web3daily.news/news/api/tnv/coinData/list"
        ),
        stream_url_template=_read_str_env(
            _STREAM_URL_ENV, "wss://fstream.binance.com/ws/{symbol}@markPrice"
        ),
        funding_symbol=_read_str_env(_FUNDING_SYMBOL_ENV, "ethusdt").lower(),
        poll_interval=_read_float_env(_POLL_INTERVAL_ENV, 10.0, positive=True),
        reconnect_delay=_read_float_env(_RECONNECT_DELAY_ENV, 5.0, positive=True),
        alert_cooldown=_read_float_env(_COOLDOWN_ENV, 600.0, positive=True),
        funding_rate_threshold=_read_float_env(_RATE_THRESHOLD_ENV, 5.0),
        funding_margin_price=_read_float_env(_MARGIN_PRICE_ENV, 5000.0),
        funding_take_profit_price=_read_float_env(_TAKE_PROFIT_PRICE_ENV, 3200.0),
        status_host=_read_str_env(_STATUS_HOST_ENV, "0.0.0.0"),
        status_port=_read_port(8081),
        sms_gateway_url=_read_str_env(
            _SMS_GATEWAY_URL_ENV, "https://api.mysubmail.com/message/send"
        ),
        sms_app_id=_read_str_env(_SMS_APP_ID_ENV, "xxxxx"),
        sms_signature=_read_str_env(_SMS_SIGNATURE_ENV, "xxxxxxxxxxx"),
        sms_destination=_read_str_env(_SMS_DESTINATION_ENV, "139xxxxxxxx"),
        http_timeout=_read_float_env(_HTTP_TIMEOUT_ENV, 10.0, positive=True),
        log_level=_read_log_level("INFO"),
    )
