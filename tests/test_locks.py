# tests/test_locks.py

"""Tests for the asyncio readers-writer lock."""

import asyncio

import pytest
from scoreforge.ranking.locks import ReadWriteLock


@pytest.mark.asyncio
async def test_readers_share_the_lock():
    lock = ReadWriteLock()

    async with lock.read():
        async with lock.read():
            assert lock.readers == 2

    assert lock.readers == 0


@pytest.mark.asyncio
async def test_writer_waits_for_readers_to_finish():
    lock = ReadWriteLock()
    order: list[str] = []

    async def writer():
        async with lock.write():
            order.append("write")

    async with lock.read():
        task = asyncio.create_task(writer())
        await asyncio.sleep(0.01)
        assert order == []
        order.append("read-done")

    await asyncio.wait_for(task, timeout=1)
    assert order == ["read-done", "write"]


@pytest.mark.asyncio
async def test_waiting_writer_blocks_new_readers():
    """A queued writer goes before readers that arrive after it."""
    lock = ReadWriteLock()
    order: list[str] = []

    async def writer():
        async with lock.write():
            order.append("write")

    async def late_reader():
        async with lock.read():
            order.append("late-read")

    async with lock.read():
        writer_task = asyncio.create_task(writer())
        await asyncio.sleep(0.01)
        reader_task = asyncio.create_task(late_reader())
        await asyncio.sleep(0.01)
        assert order == []

    await asyncio.wait_for(asyncio.gather(writer_task, reader_task), timeout=1)
    assert order == ["write", "late-read"]


@pytest.mark.asyncio
async def test_failure_inside_write_scope_releases_lock():
    lock = ReadWriteLock()

    with pytest.raises(RuntimeError):
        async with lock.write():
            raise RuntimeError("boom")

    assert not lock.writer_active
    async with asyncio.timeout(1):
        async with lock.read():
            pass


@pytest.mark.asyncio
async def test_cancelled_holder_releases_lock():
    """Abandoning an operation mid-scope must not leave the lock held."""
    lock = ReadWriteLock()
    entered = asyncio.Event()

    async def slow_writer():
        async with lock.write():
            entered.set()
            await asyncio.sleep(10)

    task = asyncio.create_task(slow_writer())
    await entered.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert not lock.writer_active
    async with asyncio.timeout(1):
        async with lock.write():
            pass


@pytest.mark.asyncio
async def test_cancelled_waiting_writer_unblocks_readers():
    lock = ReadWriteLock()

    async def writer():
        async with lock.write():
            pass

    async with lock.read():
        waiting = asyncio.create_task(writer())
        await asyncio.sleep(0.01)
        waiting.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiting

        async with asyncio.timeout(1):
            async with lock.read():
                assert lock.readers == 2
