"""Tests for per-key locking."""

import anyio
import pytest

from anidb_resolver.cache.locks import KeyedLock


@pytest.mark.asyncio
async def test_same_key_is_exclusive() -> None:
    locks = KeyedLock()
    active = 0
    peak = 0

    async def worker() -> None:
        nonlocal active, peak
        async with locks.hold("1"):
            active += 1
            peak = max(peak, active)
            await anyio.sleep(0.01)
            active -= 1

    async with anyio.create_task_group() as tg:
        for _ in range(3):
            tg.start_soon(worker)

    assert peak == 1


@pytest.mark.asyncio
async def test_different_keys_run_concurrently() -> None:
    locks = KeyedLock()
    inside = anyio.Event()

    async def holder() -> None:
        async with locks.hold("a"):
            inside.set()
            await anyio.sleep(0.05)

    async with anyio.create_task_group() as tg:
        tg.start_soon(holder)
        await inside.wait()
        with anyio.fail_after(0.5):
            async with locks.hold("b"):
                assert len(locks) == 2


@pytest.mark.asyncio
async def test_locks_are_released_after_use() -> None:
    locks = KeyedLock()

    async with locks.hold("a"):
        pass

    assert len(locks) == 0
