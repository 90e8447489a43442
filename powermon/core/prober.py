"""Client-side periodic probe loop."""

from __future__ import annotations

import asyncio
import logging

from powermon.core.channels import send_unless
from powermon.core.errors import ProbeError
from powermon.transports.base import Probe

LOGGER = logging.getLogger(__name__)


class ProbeSender:
    def __init__(
        self,
        probe: Probe,
        outcomes: asyncio.Queue[bool],
        stop: asyncio.Event,
        *,
        interval_s: float,
        retry_interval_s: float,
    ) -> None:
        self._probe = probe
        self._outcomes = outcomes
        self._stop = stop
        self.interval_s = interval_s
        self.retry_interval_s = retry_interval_s
        self.attempts = 0

    async def run(self) -> None:
        while not self._stop.is_set():
            self.attempts += 1
            try:
                await self._probe.check()
            except ProbeError as exc:
                LOGGER.warning("Error pinging server: %s", exc)
                success = False
            else:
                success = True

            if not await send_unless(self._outcomes, success, self._stop):
                break
            # Failures retry on the short interval so an outage is sampled densely.
            await self._pause(self.interval_s if success else self.retry_interval_s)
        LOGGER.info("Probe sender stopped after %d attempts", self.attempts)

    async def _pause(self, delay: float) -> None:
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=delay)
        except TimeoutError:
            pass
