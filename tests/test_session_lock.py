"""
Тесты для KeyedLockManager.
"""
import asyncio

import pytest

from app.infrastructure.concurrency import KeyedLockManager


@pytest.mark.asyncio
async def test_same_key_is_serialized():
    locks = KeyedLockManager("test")
    order = []

    async def worker(n: int):
        async with locks.lock("k"):
            order.append(f"start-{n}")
            await asyncio.sleep(0.01)
            order.append(f"end-{n}")

    await asyncio.gather(worker(1), worker(2), worker(3))

    assert order == ["start-1", "end-1", "start-2", "end-2", "start-3", "end-3"]


@pytest.mark.asyncio
async def test_different_keys_do_not_block():
    locks = KeyedLockManager("test")
    inner_entered = asyncio.Event()

    async with locks.lock("a"):
        async def other():
            async with locks.lock("b"):
                inner_entered.set()

        await asyncio.wait_for(other(), timeout=1)

    assert inner_entered.is_set()
    assert locks.get_lock_count() == 2


@pytest.mark.asyncio
async def test_is_locked():
    locks = KeyedLockManager("test")

    assert not locks.is_locked("k")
    async with locks.lock("k"):
        assert locks.is_locked("k")
    assert not locks.is_locked("k")


@pytest.mark.asyncio
async def test_lock_released_on_error():
    locks = KeyedLockManager("test")

    with pytest.raises(RuntimeError):
        async with locks.lock("k"):
            raise RuntimeError("boom")

    assert not locks.is_locked("k")


@pytest.mark.asyncio
async def test_cleanup_removes_oldest_unused_locks():
    locks = KeyedLockManager("test")
    for key in ("a", "b", "c", "d"):
        async with locks.lock(key):
            pass
    async with locks.lock("a"):
        pass

    evicted = locks.cleanup_unused_locks(max_locks=2)

    assert evicted == ["b", "c"]
    assert locks.get_lock_count() == 2


@pytest.mark.asyncio
async def test_cleanup_keeps_held_and_waiting_locks():
    locks = KeyedLockManager("test")
    entered = asyncio.Event()
    release = asyncio.Event()

    async def holder():
        async with locks.lock("busy"):
            entered.set()
            await release.wait()

    task = asyncio.create_task(holder())
    await entered.wait()
    waiter = asyncio.create_task(_hold_briefly(locks, "busy"))
    await asyncio.sleep(0)

    evicted = locks.cleanup_unused_locks(max_locks=0)

    assert evicted == []
    assert locks.is_locked("busy")
    release.set()
    await asyncio.gather(task, waiter)
    assert locks.cleanup_unused_locks(max_locks=0) == ["busy"]


async def _hold_briefly(locks, key):
    async with locks.lock(key):
        await asyncio.sleep(0)
