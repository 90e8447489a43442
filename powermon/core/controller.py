"""Client-side timeout state machine."""

from __future__ import annotations

import asyncio
import logging

from powermon.core.errors import ShutdownError
from powermon.core.model import Armed, Disarmed, Expired, TimeoutState
from powermon.core.timer import Timer
from powermon.transports.base import Notifier, ShutdownAction, notify_quietly

TIMEOUT_MESSAGE = "Timeout reached, shutting down."
LOGGER = logging.getLogger(__name__)


class TimeoutController:
    """Arms a shutdown countdown on failed probes and disarms it on success.

    A single timer is outstanding at a time, so the terminal action only fires
    after a continuous window of ``timeout_s`` without a successful probe. All
    state changes happen on the task running :meth:`run`.
    """

    def __init__(
        self,
        timeout_s: float,
        *,
        shutdown: ShutdownAction,
        notifier: Notifier,
        stop: asyncio.Event | None = None,
    ) -> None:
        self.timeout_s = timeout_s
        self.stop = stop or asyncio.Event()
        self._shutdown = shutdown
        self._notifier = notifier
        self._timer = Timer()
        self._state: TimeoutState = Disarmed()

    @property
    def state(self) -> TimeoutState:
        return self._state

    def arm(self) -> Armed:
        self._state = Armed(deadline=self._timer.reset(self.timeout_s))
        return self._state

    def handle_outcome(self, success: bool) -> TimeoutState:
        state = self._state
        if success and isinstance(state, Armed):
            if not self._timer.stop():
                self._timer.drain()
            self._state = Disarmed()
            LOGGER.info("Ping succeeded, stopping timeout")
        elif not success and isinstance(state, Disarmed):
            self.arm()
            LOGGER.info("Ping failed, shutting down in %.1f seconds without a reply", self.timeout_s)
        return self._state

    async def run(self, outcomes: asyncio.Queue[bool]) -> None:
        # Start armed: the server may already be gone before the first probe.
        self.arm()
        while True:
            outcome = asyncio.ensure_future(outcomes.get())
            expiry = asyncio.ensure_future(self._timer.expired.get())
            try:
                done, _ = await asyncio.wait({outcome, expiry}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                for task in (outcome, expiry):
                    if not task.done():
                        task.cancel()

            if outcome in done:
                self.handle_outcome(outcome.result())
            # A success that raced the expiry wins; its drain already absorbed it.
            if expiry in done and isinstance(self._state, Armed):
                await self._expire()
                return

    async def _expire(self) -> None:
        self._state = Expired()
        self.stop.set()
        LOGGER.warning(TIMEOUT_MESSAGE)
        notify_quietly(self._notifier, TIMEOUT_MESSAGE)
        try:
            await asyncio.to_thread(self._shutdown)
        except ShutdownError as exc:
            LOGGER.error("Error executing shutdown command: %s", exc)
