from __future__ import annotations

import time
from typing import Callable


class CooldownLimiter:
    """Allows one dispatch attempt per cooldown window.

    ``last_sent`` starts at the epoch so the first eligible tick may alert.
    """

    def __init__(self, cooldown: float = 600.0, clock: Callable[[], float] = time.time) -> None:
        self.cooldown = cooldown
        self.last_sent = 0.0
        self._clock = clock

    def now(self) -> float:
        return self._clock()

    def ready(self, now: float) -> bool:
        return now - self.last_sent > self.cooldown

    def mark(self, now: float) -> None:
        self.last_sent = now
