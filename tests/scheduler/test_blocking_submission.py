"""submit_blocking, submit_blocking_safe and submit_delayed."""

import asyncio
import time

import pytest

from cosched import CancelFault, TimeoutFault, pause


def _slow(seconds, value):
    yield pause(seconds)
    return value


def test_blocking_returns_value(blocking_scheduler):
    assert blocking_scheduler.submit_blocking(_slow, 0.01, "value") == "value"


def test_blocking_raises_fault(blocking_scheduler):
    def task():
        yield
        raise ValueError("blocking failure")

    with pytest.raises(ValueError, match="blocking failure"):
        blocking_scheduler.submit_blocking(task)


def test_blocking_plain_function(blocking_scheduler):
    assert blocking_scheduler.submit_blocking(lambda: "plain") == "plain"


def test_blocking_timeout(blocking_scheduler):
    started = time.monotonic()

    with pytest.raises(TimeoutFault) as excinfo:
        blocking_scheduler.submit_blocking(_slow, 1, "never", timeout=0.05)

    assert time.monotonic() - started < 0.5
    assert excinfo.value.seconds == 0.05


def test_blocking_without_timeout_waits(blocking_scheduler):
    assert blocking_scheduler.submit_blocking(_slow, 0.05, "patient", timeout=1) == "patient"


def test_blocking_reuses_the_owned_loop(blocking_scheduler):
    loop = blocking_scheduler.loop

    blocking_scheduler.submit_blocking(_slow, 0, 1)
    blocking_scheduler.submit_blocking(_slow, 0, 2)

    assert blocking_scheduler.loop is loop
    assert not loop.is_closed()


def test_close_releases_owned_loop(blocking_scheduler):
    loop = blocking_scheduler.loop
    blocking_scheduler.close()

    assert loop.is_closed()


def test_safe_variant_wraps_outcomes(blocking_scheduler):
    ok = blocking_scheduler.submit_blocking_safe(_slow, 0, "fine")
    err = blocking_scheduler.submit_blocking_safe(_slow, 1, "never", timeout=0.02)

    assert ok.is_ok
    assert ok.unwrap() == "fine"
    assert err.is_err
    assert isinstance(err.unwrap_err(), TimeoutFault)
    assert err.elapsed >= 0


def test_context_manager_closes(blocking_scheduler):
    with blocking_scheduler as scheduler:
        assert scheduler.submit_blocking(_slow, 0, "ctx") == "ctx"

    assert scheduler.loop.is_closed()


@pytest.mark.asyncio
async def test_blocking_inside_running_loop_is_refused(scheduler):
    with pytest.raises(RuntimeError):
        scheduler.submit_blocking(_slow, 0, "x")
    with pytest.raises(RuntimeError):
        scheduler.submit_blocking_safe(_slow, 0, "x")


@pytest.mark.asyncio
async def test_delayed_submission(scheduler):
    calls = []

    def job():
        calls.append(time.monotonic())
        return "later"

    started = time.monotonic()

    assert await scheduler.submit_delayed(0.05, job) == "later"
    assert calls[0] - started >= 0.045


@pytest.mark.asyncio
async def test_delayed_generator_job(scheduler):
    assert await scheduler.submit_delayed(0.01, _slow, 0.01, "chained") == "chained"


@pytest.mark.asyncio
async def test_cancelled_before_delay_never_runs(scheduler):
    calls = []
    result = scheduler.submit_delayed(0.1, calls.append, True)
    await asyncio.sleep(0.02)

    result.cancel()
    await asyncio.sleep(0.15)

    assert calls == []
    assert isinstance(result.exception(), CancelFault)


@pytest.mark.asyncio
async def test_cancel_after_delay_reaches_the_job(scheduler):
    finished = []

    def job():
        yield pause(1)
        finished.append(True)

    result = scheduler.submit_delayed(0.01, job)
    await asyncio.sleep(0.05)
    assert len(scheduler.runnable) == 2

    result.cancel()
    for _ in range(10):
        await asyncio.sleep(0)

    assert finished == []
    assert scheduler.runnable == ()
