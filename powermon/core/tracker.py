"""Bridge inbound verification requests into the dispatcher's event stream."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from powermon.core.dispatcher import WakeDispatcher
from powermon.core.model import VerificationEvent

LOGGER = logging.getLogger(__name__)


class VerificationTracker:
    def __init__(self, dispatcher: WakeDispatcher) -> None:
        self._dispatcher = dispatcher

    @property
    def accepting(self) -> bool:
        return not self._dispatcher.finished

    async def report(self, macs: Iterable[str], nickname: str = "") -> int:
        """Forward each address, in order, as one verification event.

        Each send waits until the dispatcher takes it, so events are delayed
        but never dropped. Returns the number of events delivered.
        """
        delivered = 0
        for mac in macs:
            if not await self._dispatcher.submit(VerificationEvent(mac=mac, nickname=nickname)):
                LOGGER.debug("Dispatcher finished, skipping remaining verification from [%s]", nickname)
                break
            delivered += 1
        return delivered
