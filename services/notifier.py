"""SMS gateway client used to deliver alerts."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Protocol

import httpx

from errors import DispatchError

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send(self, destination: str, message: str) -> None:
        ...


class SmsNotifier:
    """Posts form-encoded messages to the SMS gateway.

    A message counts as delivered when the gateway answers HTTP 200; the
    response body is never inspected.
    """

    def __init__(
        self,
        url: str,
        app_id: str,
        signature: str,
        client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.url = url
        self._app_id = app_id
        self._signature = signature
        self._client = client or httpx.Client(timeout=timeout)
        self._clock = clock

    def send(self, destination: str, message: str) -> None:
        form = {
            "appid": self._app_id,
            "signature": self._signature,
            "timestamp": str(int(self._clock())),
            "to": destination,
            "content": message,
        }
        try:
            response = self._client.post(self.url, data=form)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise DispatchError(f"SMS gateway call failed: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            raise DispatchError(
                f"SMS gateway answered with status {response.status_code}."
            )
        logger.info("SMS delivered", extra={"destination": destination})
