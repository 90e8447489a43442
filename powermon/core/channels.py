"""Channel helpers shared by the single-writer loops."""

from __future__ import annotations

import asyncio
from typing import TypeVar

T = TypeVar("T")


async def send_unless(queue: asyncio.Queue[T], item: T, closed: asyncio.Event) -> bool:
    """Put ``item`` on ``queue`` unless ``closed`` is set first.

    Returns ``True`` when the item was delivered. Never blocks past the point
    where the receiving loop has gone away.
    """
    if closed.is_set():
        return False
    put = asyncio.ensure_future(queue.put(item))
    gone = asyncio.ensure_future(closed.wait())
    try:
        done, _ = await asyncio.wait({put, gone}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (put, gone):
            if not task.done():
                task.cancel()
    return put in done
