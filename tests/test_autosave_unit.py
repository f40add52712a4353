from __future__ import annotations

import asyncio
import logging

import pytest

from prowriter.application.services.wizard.autosave import AutoSaveDebouncer


@pytest.mark.anyio
async def test_rapid_schedules_coalesce_into_one_save_with_latest_state():
    state = {"value": 0}
    saved: list[int] = []

    async def save():
        saved.append(state["value"])

    debouncer = AutoSaveDebouncer(save, 0.05)
    for i in range(1, 6):
        state["value"] = i
        debouncer.schedule()
        await asyncio.sleep(0.005)

    assert debouncer.pending
    await asyncio.sleep(0.15)
    assert saved == [5]
    assert not debouncer.pending


@pytest.mark.anyio
async def test_cancel_prevents_save():
    saved: list[int] = []

    async def save():
        saved.append(1)

    debouncer = AutoSaveDebouncer(save, 0.02)
    debouncer.schedule()
    assert debouncer.cancel() is True
    await asyncio.sleep(0.05)
    assert saved == []
    assert debouncer.cancel() is False


@pytest.mark.anyio
async def test_flush_saves_immediately():
    saved: list[int] = []

    async def save():
        saved.append(1)

    debouncer = AutoSaveDebouncer(save, 10)
    debouncer.schedule()
    await debouncer.flush()
    assert saved == [1]
    assert not debouncer.pending

    # 没有挂起的保存时 flush 不会再写
    await debouncer.flush()
    assert saved == [1]


@pytest.mark.anyio
async def test_save_failure_is_logged_and_swallowed(caplog: pytest.LogCaptureFixture):
    async def save():
        raise RuntimeError("db down")

    debouncer = AutoSaveDebouncer(save, 0)
    with caplog.at_level(logging.ERROR):
        debouncer.schedule()
        await asyncio.sleep(0.02)

    assert any(r.getMessage() == "wizard.autosave_failed" for r in caplog.records)


@pytest.mark.anyio
async def test_saves_never_overlap():
    active = 0
    max_active = 0

    async def save():
        nonlocal active, max_active
        active += 1
        max_active = max(max_active, active)
        await asyncio.sleep(0.02)
        active -= 1

    debouncer = AutoSaveDebouncer(save, 0)
    debouncer.schedule()
    await asyncio.sleep(0.005)
    debouncer.schedule()
    await asyncio.sleep(0.005)
    await debouncer.flush()
    await asyncio.sleep(0.05)
    assert max_active == 1


@pytest.mark.anyio
async def test_close_flushes_and_stops_scheduling():
    saved: list[int] = []

    async def save():
        saved.append(1)

    debouncer = AutoSaveDebouncer(save, 10)
    debouncer.schedule()

    await debouncer.close()
    assert saved == [1]
    assert debouncer.closed

    debouncer.schedule()
    assert not debouncer.pending
    await debouncer.flush()
    assert saved == [1]
