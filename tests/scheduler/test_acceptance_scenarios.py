"""End-to-end behaviour of a single submitted task."""

import time

import pytest

from cosched import CancelFault, Promise, TimeoutFault, cancel, deadline, pause, resolved, return_value


@pytest.mark.asyncio
async def test_pause_then_return(scheduler):
    def fn():
        yield pause(0.2)
        return "done"

    started = time.monotonic()

    assert await scheduler.submit(fn) == "done"
    assert time.monotonic() - started >= 0.19


@pytest.mark.asyncio
async def test_deadline_before_future_settles(scheduler):
    cancelled = []
    future = Promise(lambda: cancelled.append(True), loop=scheduler.loop)
    scheduler.loop.call_later(0.4, lambda: future.done() or future.set_result("late"))

    def fn():
        yield deadline(0.2)
        yield future

    started = time.monotonic()

    with pytest.raises(TimeoutFault):
        await scheduler.submit(fn)

    elapsed = time.monotonic() - started
    assert 0.19 <= elapsed < 0.4
    assert cancelled == [True]


@pytest.mark.asyncio
async def test_mapping_of_resolved_futures(scheduler):
    def fn():
        return (yield {"a": resolved("x", loop=scheduler.loop), "b": resolved("y", loop=scheduler.loop)})

    result = await scheduler.submit(fn)

    assert result == {"a": "x", "b": "y"}
    assert list(result) == ["a", "b"]


@pytest.mark.asyncio
async def test_nested_return_value(scheduler):
    observed = []

    def child():
        yield return_value("child")

    def fn():
        observed.append((yield child()))

    await scheduler.submit(fn)

    assert observed == ["child"]


@pytest.mark.asyncio
async def test_cancel_with_code(scheduler):
    steps = []

    def fn():
        steps.append("before")
        yield cancel("bar", 422)
        steps.append("after")

    with pytest.raises(CancelFault) as excinfo:
        await scheduler.submit(fn)

    assert excinfo.value == CancelFault("bar", 422)
    assert steps == ["before"]
