"""Collaborator interfaces consumed by the liveness and wake loops."""

from __future__ import annotations

import logging
from typing import Protocol

from powermon.core.errors import NotificationError

LOGGER = logging.getLogger(__name__)


class Probe(Protocol):
    async def check(self) -> None:
        """Run one liveness probe; raise ProbeError unless the server answered OK."""


class Notifier(Protocol):
    def send(self, message: str) -> None:
        """Dispatch a best-effort notification without waiting for delivery."""

    def flush(self, timeout_s: float) -> bool:
        """Wait up to ``timeout_s`` for pending deliveries; ``False`` if some are still running."""


class ShutdownAction(Protocol):
    def __call__(self) -> None:
        """Run the OS-level terminal action; raise ShutdownError on failure."""


class WakePacketSender(Protocol):
    def send(self, mac: str) -> None:
        """Send one wake packet to ``mac``; raise WakeError on failure."""


def notify_quietly(notifier: Notifier, message: str) -> bool:
    try:
        notifier.send(message)
    except NotificationError as exc:
        LOGGER.error("Notification failed: %s", exc)
        return False
    return True
