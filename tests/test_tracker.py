from __future__ import annotations

import asyncio

import pytest

from fakes import FakeNotifier, FakeWakeSender
from powermon.core.dispatcher import WakeDispatcher
from powermon.core.tracker import VerificationTracker

AA = "AA:AA:AA:AA:AA:AA"
BB = "BB:BB:BB:BB:BB:BB"


@pytest.mark.asyncio
async def test_report_forwards_every_address_in_order() -> None:
    dispatcher = WakeDispatcher(
        [AA, BB], sender=FakeWakeSender(), notifier=FakeNotifier(), verify_mode=True, tick_interval_s=10
    )
    notifier = dispatcher._notifier
    tracker = VerificationTracker(dispatcher)
    task = asyncio.create_task(dispatcher.run())

    delivered = await tracker.report([BB, "CC:CC:CC:CC:CC:CC", AA], "rack")
    await asyncio.wait_for(task, timeout=1)

    assert delivered == 3
    assert notifier.messages[:2] == [
        f"Client [rack] {BB} is verified back online.",
        f"Client [rack] {AA} is verified back online.",
    ]
    assert not tracker.accepting


@pytest.mark.asyncio
async def test_report_stops_forwarding_once_dispatcher_finished() -> None:
    dispatcher = WakeDispatcher(
        [AA], sender=FakeWakeSender(), notifier=FakeNotifier(), verify_mode=True, tick_interval_s=10
    )
    tracker = VerificationTracker(dispatcher)
    task = asyncio.create_task(dispatcher.run())

    assert await tracker.report([AA]) == 1
    await asyncio.wait_for(task, timeout=1)

    delivered = await asyncio.wait_for(tracker.report([BB, AA]), timeout=1)

    assert delivered == 0
