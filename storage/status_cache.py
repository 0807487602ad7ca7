from __future__ import annotations

from functools import lru_cache
from threading import Lock
from typing import Optional

NO_DATA = "no data, waiting..."


class StatusCache:
    """Holds the most recent status line for the status page."""

    def __init__(self) -> None:
        self._snapshot: Optional[str] = None
        self._lock = Lock()

    def set(self, snapshot: str) -> None:
        with self._lock:
            self._snapshot = snapshot

    def get(self) -> str:
        with self._lock:
            snapshot = self._snapshot
        return NO_DATA if snapshot is None else snapshot


@lru_cache
def build_default_status_cache() -> StatusCache:
    return StatusCache()
