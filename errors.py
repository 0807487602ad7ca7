"""Error taxonomy shared by the feeds, the notifier and the CLI."""

from __future__ import annotations


class MonitorError(Exception):
    """Base class for every error raised by the monitor."""


class ArgumentError(MonitorError):
    """Invalid startup arguments; fatal."""


class FetchError(MonitorError):
    """Transport failure while polling a data source."""


class StreamConnectionError(MonitorError):
    """A streaming connection could not be established."""


class DecodeError(MonitorError):
    """A response or message did not match the expected shape."""


class ParseError(DecodeError):
    """A field was present but could not be parsed as a number."""


class NotFoundError(MonitorError):
    """No record matched the configured identifier."""


class DispatchError(MonitorError):
    """The notification gateway rejected or never received a message."""
