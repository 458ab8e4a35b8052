"""Tests for the InterruptController."""

import asyncio
import os
import signal

import pytest

from flowstate.graph.interrupt import InterruptController


def test_request_cancel_is_idempotent_and_first_reason_wins():
    interrupt = InterruptController()
    assert not interrupt.is_cancel_requested()

    interrupt.request_cancel("first")
    interrupt.request_cancel("second")

    assert interrupt.is_cancel_requested()
    assert interrupt.reason == "first"

    interrupt.reset()
    assert not interrupt.is_cancel_requested()
    assert interrupt.reason is None


def test_poll_interval_must_be_positive():
    with pytest.raises(ValueError):
        InterruptController(poll_interval=0)


@pytest.mark.asyncio
async def test_sleep_completes_without_cancel():
    interrupt = InterruptController(poll_interval=0.01)
    assert await interrupt.sleep(0.03) is True


@pytest.mark.asyncio
async def test_sleep_returns_false_soon_after_cancel():
    interrupt = InterruptController(poll_interval=0.01)
    loop = asyncio.get_running_loop()
    loop.call_later(0.03, interrupt.request_cancel, "stop")

    started = loop.time()
    finished = await interrupt.sleep(10)

    assert finished is False
    assert loop.time() - started < 1.0


@pytest.mark.asyncio
async def test_wait_for_returns_result_or_cancels_work():
    interrupt = InterruptController(poll_interval=0.01)

    async def answer():
        await asyncio.sleep(0.01)
        return 42

    assert await interrupt.wait_for(answer()) == (True, 42)

    slow = asyncio.ensure_future(asyncio.sleep(10))
    asyncio.get_running_loop().call_later(0.03, interrupt.request_cancel, "stop")
    assert await interrupt.wait_for(slow) == (False, None)
    await asyncio.sleep(0.01)
    assert slow.cancelled()


@pytest.mark.asyncio
async def test_wait_for_lets_cancelled_work_clean_up_before_returning():
    interrupt = InterruptController(poll_interval=0.01)
    cleaned = []

    async def work():
        try:
            await asyncio.sleep(10)
        finally:
            cleaned.append("released")

    task = asyncio.ensure_future(work())
    asyncio.get_running_loop().call_later(0.03, interrupt.request_cancel, "stop")

    assert await interrupt.wait_for(task) == (False, None)
    # No extra loop iteration needed: the work has already finished
    assert task.cancelled()
    assert cleaned == ["released"]


@pytest.mark.asyncio
async def test_signal_handler_requests_cancel():
    interrupt = InterruptController(poll_interval=0.01)
    interrupt.install_signal_handlers([signal.SIGUSR1])
    try:
        os.kill(os.getpid(), signal.SIGUSR1)
        assert not await interrupt.sleep(1)
        assert interrupt.reason == "received SIGUSR1"
    finally:
        interrupt.remove_signal_handlers()
