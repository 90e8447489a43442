from __future__ import annotations

import asyncio

import pytest

from powermon.core.errors import ProbeError
from powermon.core.prober import ProbeSender


class ScriptedProbe:
    def __init__(self, results: list[bool]) -> None:
        self.results = list(results)
        self.calls: list[float] = []

    async def check(self) -> None:
        self.calls.append(asyncio.get_running_loop().time())
        ok = self.results.pop(0) if self.results else True
        if not ok:
            raise ProbeError("connection refused")


@pytest.mark.asyncio
async def test_reports_outcomes_in_order() -> None:
    probe = ScriptedProbe([True, False, True])
    outcomes: asyncio.Queue[bool] = asyncio.Queue(maxsize=1)
    stop = asyncio.Event()
    sender = ProbeSender(probe, outcomes, stop, interval_s=0.01, retry_interval_s=0.01)

    task = asyncio.create_task(sender.run())
    received = [await asyncio.wait_for(outcomes.get(), timeout=1) for _ in range(3)]
    stop.set()
    await asyncio.wait_for(task, timeout=1)

    assert received == [True, False, True]


@pytest.mark.asyncio
async def test_failures_retry_on_short_interval() -> None:
    probe = ScriptedProbe([False, False, True])
    outcomes: asyncio.Queue[bool] = asyncio.Queue(maxsize=1)
    stop = asyncio.Event()
    sender = ProbeSender(probe, outcomes, stop, interval_s=5.0, retry_interval_s=0.02)

    task = asyncio.create_task(sender.run())
    for _ in range(3):
        await asyncio.wait_for(outcomes.get(), timeout=1)
    await asyncio.sleep(0.1)
    stop.set()
    await asyncio.wait_for(task, timeout=1)

    # After the success the sender waits the full interval, so no fourth probe.
    assert len(probe.calls) == 3
    assert probe.calls[2] - probe.calls[0] < 1.0


@pytest.mark.asyncio
async def test_stop_flag_prevents_further_probes() -> None:
    probe = ScriptedProbe([])
    outcomes: asyncio.Queue[bool] = asyncio.Queue(maxsize=1)
    stop = asyncio.Event()
    stop.set()
    sender = ProbeSender(probe, outcomes, stop, interval_s=0.01, retry_interval_s=0.01)

    await asyncio.wait_for(sender.run(), timeout=1)

    assert probe.calls == []
    assert outcomes.empty()


@pytest.mark.asyncio
async def test_sender_exits_when_nobody_reads_after_stop() -> None:
    probe = ScriptedProbe([False, False, False])
    outcomes: asyncio.Queue[bool] = asyncio.Queue(maxsize=1)
    stop = asyncio.Event()
    sender = ProbeSender(probe, outcomes, stop, interval_s=0.01, retry_interval_s=0.01)

    task = asyncio.create_task(sender.run())
    await asyncio.sleep(0.1)
    # The single slot is full and the sender is blocked emitting the next outcome.
    stop.set()
    await asyncio.wait_for(task, timeout=1)

    assert len(probe.calls) == 2
