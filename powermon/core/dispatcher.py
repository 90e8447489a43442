"""Server-side wake packet broadcaster with verification tracking."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from powermon.core.channels import send_unless
from powermon.core.config import DEFAULT_ATTEMPT_BUDGET, DEFAULT_TICK_INTERVAL_S, canonical_mac
from powermon.core.errors import ConfigurationError, WakeError
from powermon.core.model import DispatchState, VerificationEvent, WakeTarget
from powermon.transports.base import Notifier, WakePacketSender, notify_quietly

COMPLETE_MESSAGE = "All clients are back online."
LOGGER = logging.getLogger(__name__)


class WakeDispatcher:
    """Owns the wake targets and the ticker that wakes them.

    The target map is only touched by the task running :meth:`run`; other
    tasks hand over verification events through :meth:`submit`.
    """

    def __init__(
        self,
        targets: Iterable[str],
        *,
        sender: WakePacketSender,
        notifier: Notifier,
        verify_mode: bool = False,
        tick_interval_s: float = DEFAULT_TICK_INTERVAL_S,
        attempt_budget: int = DEFAULT_ATTEMPT_BUDGET,
    ) -> None:
        self._targets: dict[str, WakeTarget] = {}
        for value in targets:
            try:
                mac = canonical_mac(value)
            except ValueError as exc:
                raise ConfigurationError(f"Invalid wake target: {exc}") from exc
            self._targets.setdefault(mac, WakeTarget(mac=mac))
        self._sender = sender
        self._notifier = notifier
        self._events: asyncio.Queue[VerificationEvent] = asyncio.Queue(maxsize=1)
        self._finished = asyncio.Event()
        self.tick_interval_s = tick_interval_s
        self.attempt_budget = attempt_budget
        self.state = DispatchState(verify_mode=verify_mode)
        self.completed = False

    @property
    def targets(self) -> tuple[WakeTarget, ...]:
        return tuple(self._targets.values())

    @property
    def pending(self) -> tuple[str, ...]:
        return tuple(t.mac for t in self._targets.values() if not t.verified)

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    async def wait_finished(self) -> None:
        await self._finished.wait()

    async def submit(self, event: VerificationEvent) -> bool:
        """Hand ``event`` to the dispatcher loop; ``False`` once it has exited."""
        return await send_unless(self._events, event, self._finished)

    def tick(self) -> bool:
        """Broadcast to every unverified target. Returns ``True`` when the loop should stop."""
        for mac in self.pending:
            try:
                self._sender.send(mac)
            except WakeError as exc:
                LOGGER.warning("Failed to send WOL to %s -- %s", mac, exc)
            else:
                LOGGER.info("Sent WOL packet to %s", mac)
        self.state.sent_count += 1

        if not self.state.verify_mode and self.state.sent_count >= self.attempt_budget:
            LOGGER.info(
                "Sent %d WOL packets to each client, stopping WOL sender.", self.state.sent_count
            )
            return True
        return False

    def apply(self, event: VerificationEvent) -> bool:
        """Record a verification. Returns ``True`` when every target is verified in verify mode."""
        try:
            mac = canonical_mac(event.mac)
        except ValueError:
            LOGGER.debug("Ignoring malformed verification address %r", event.mac)
            return False

        target = self._targets.get(mac)
        if target is None:
            LOGGER.debug("Ignoring verification for unknown address %s", mac)
            return False
        if target.verified:
            return False

        target.verified = True
        self.state.verified_count += 1
        LOGGER.info("Received verification from [%s] mac %s", event.nickname, mac)
        notify_quietly(self._notifier, f"Client [{event.nickname}] {mac} is verified back online.")

        if self.state.verify_mode and self.state.verified_count == len(self._targets):
            LOGGER.info("Received verification from all clients. Stopped sending WOL packets.")
            self.completed = True
            notify_quietly(self._notifier, COMPLETE_MESSAGE)
            return True
        return False

    async def run(self) -> DispatchState:
        loop = asyncio.get_running_loop()
        try:
            if self.state.verify_mode and not self._targets:
                LOGGER.info("No wake targets to verify, WOL sender not started")
                self.completed = True
                return self.state

            next_tick = loop.time() + self.tick_interval_s
            while True:
                try:
                    event = await asyncio.wait_for(
                        self._events.get(), timeout=max(0.0, next_tick - loop.time())
                    )
                except TimeoutError:
                    next_tick = max(next_tick + self.tick_interval_s, loop.time())
                    if self.tick():
                        return self.state
                else:
                    if self.apply(event):
                        return self.state
        finally:
            self._finished.set()
