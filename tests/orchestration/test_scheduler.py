# tests/orchestration/test_scheduler.py
import asyncio

import pytest

from repertoire_trainer.orchestration.scheduler import AsyncioScheduler


@pytest.mark.asyncio
async def test_callback_runs_after_delay():
    scheduler = AsyncioScheduler()
    calls = []

    scheduler.schedule(0.01, lambda: calls.append("fired"))
    assert scheduler.pending == 1

    await asyncio.sleep(0.05)

    assert calls == ["fired"]
    assert scheduler.pending == 0


@pytest.mark.asyncio
async def test_cancelled_callback_never_runs():
    scheduler = AsyncioScheduler()
    calls = []

    first = scheduler.schedule(0.01, lambda: calls.append("first"))
    second = scheduler.schedule(0.01, lambda: calls.append("second"))
    first.cancel()
    second.cancel()

    await asyncio.sleep(0.05)

    assert calls == []
    assert scheduler.pending == 0


@pytest.mark.asyncio
async def test_failing_callback_does_not_stop_others():
    scheduler = AsyncioScheduler()
    calls = []

    def broken():
        raise RuntimeError("boom")

    scheduler.schedule(0, broken)
    scheduler.schedule(0.01, lambda: calls.append("after"))

    await asyncio.sleep(0.05)

    assert calls == ["after"]


@pytest.mark.asyncio
async def test_cancelled_handles_are_not_retained():
    scheduler = AsyncioScheduler()

    for _ in range(100):
        scheduler.schedule(10, lambda: None).cancel()
    live = scheduler.schedule(10, lambda: None)

    assert scheduler._handles == {live}
    assert scheduler.pending == 1
    live.cancel()
