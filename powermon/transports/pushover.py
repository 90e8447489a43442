"""Pushover notification transport."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence

import httpx

from powermon.core.errors import ConfigurationError, NotificationError

PUSHOVER_URL = "https://api.pushover.net/1/messages.json"
LOGGER = logging.getLogger(__name__)


class PushoverNotifier:
    def __init__(
        self,
        api_token: str,
        user_tokens: Sequence[str],
        *,
        nickname: str = "",
        max_attempts: int = 10,
        retry_delay_s: float = 10.0,
        client_factory: Callable[[], httpx.Client] | None = None,
    ) -> None:
        self.api_token = api_token
        self.user_tokens = tuple(user_tokens)
        self.nickname = nickname
        self.max_attempts = max_attempts
        self.retry_delay_s = retry_delay_s
        self._client_factory = client_factory or (lambda: httpx.Client(timeout=10.0))
        self._threads: list[threading.Thread] = []

    def send(self, message: str) -> None:
        """Start one delivery thread per user and return immediately."""
        if not self.api_token or not self.user_tokens:
            raise NotificationError("Notifier not initialized. Check API token or user tokens")
        if self.nickname:
            message = f"{self.nickname}: {message}"

        for user in self.user_tokens:
            payload = {
                "token": self.api_token,
                "user": user,
                "message": message,
                "priority": 1,
                "timestamp": int(time.time()),
            }
            thread = threading.Thread(target=self.deliver, args=(payload,), daemon=True)
            thread.start()
            self._threads.append(thread)

    def flush(self, timeout_s: float) -> bool:
        """Wait up to ``timeout_s`` for started deliveries. Returns ``False`` if any are still running."""
        deadline = time.monotonic() + timeout_s
        for thread in self._threads:
            thread.join(max(0.0, deadline - time.monotonic()))
        self._threads = [t for t in self._threads if t.is_alive()]
        if self._threads:
            LOGGER.warning("%d Pushover notifications still in flight", len(self._threads))
            return False
        return True

    def deliver(self, payload: dict[str, object]) -> bool:
        with self._client_factory() as client:
            for attempt in range(1, self.max_attempts + 1):
                if attempt > 1:
                    time.sleep(self.retry_delay_s)
                try:
                    resp = client.post(PUSHOVER_URL, json=payload)
                except httpx.HTTPError as exc:
                    LOGGER.error("Failed to send Pushover notification: %s", exc)
                    continue
                if resp.status_code != httpx.codes.OK:
                    LOGGER.error(
                        "Failed to send Pushover notification: Non 200 status code: %d, body: %s",
                        resp.status_code,
                        resp.text,
                    )
                    continue
                return True
        LOGGER.error(
            "Failed to send Pushover notification %d times, not trying again.", self.max_attempts
        )
        return False


class NullNotifier:
    def send(self, message: str) -> None:
        LOGGER.debug("Notifications disabled, dropping: %s", message)

    def flush(self, timeout_s: float) -> bool:
        return True


def build_notifier(
    api_token: str | None,
    user_tokens: Sequence[str],
    *,
    nickname: str = "",
) -> PushoverNotifier | NullNotifier:
    if not api_token and not user_tokens:
        return NullNotifier()
    if not api_token:
        raise ConfigurationError("API token must be specified using -k [--pushover-token]")
    if not user_tokens:
        raise ConfigurationError(
            "Must specify one or more user tokens to send notifications to using -u [--user-token]"
        )
    return PushoverNotifier(api_token, user_tokens, nickname=nickname)
