"""One-shot asyncio timer whose expiry is delivered on a channel."""

from __future__ import annotations

import asyncio


class Timer:
    """Single outstanding deadline owned by one task.

    Expiry is published on ``expired``, a single-slot queue, so the owner can
    multiplex it with other channels. ``stop`` reports ``False`` when the timer
    already fired; the caller must then ``drain`` the pending notification.
    """

    def __init__(self) -> None:
        self.expired: asyncio.Queue[float] = asyncio.Queue(maxsize=1)
        self._handle: asyncio.TimerHandle | None = None
        self.deadline: float | None = None

    @property
    def active(self) -> bool:
        return self._handle is not None

    def reset(self, delay: float) -> float:
        loop = asyncio.get_running_loop()
        if not self.stop():
            self.drain()
        self.deadline = loop.time() + delay
        self._handle = loop.call_at(self.deadline, self._fire)
        return self.deadline

    def stop(self) -> bool:
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        return True

    def drain(self) -> bool:
        try:
            self.expired.get_nowait()
        except asyncio.QueueEmpty:
            return False
        return True

    def _fire(self) -> None:
        self._handle = None
        self.expired.put_nowait(asyncio.get_running_loop().time())
