"""How the scheduler reacts to each kind of yielded value."""

import asyncio
import concurrent.futures

import pytest

from cosched import CancelFault, Promise, rejected, resolved


@pytest.mark.asyncio
async def test_plain_values_are_sent_back(scheduler):
    def task():
        received = []
        received.append((yield "a"))
        received.append((yield (1, 2)))
        received.append((yield None))
        return received

    assert await scheduler.submit(task) == ["a", (1, 2), None]


@pytest.mark.asyncio
async def test_yielded_future_resumes_with_its_value(scheduler):
    def task(future):
        value = yield future
        return value * 2

    future = Promise(loop=scheduler.loop)
    scheduler.loop.call_later(0.02, future.set_result, 21)

    assert await scheduler.submit(task, future) == 42


@pytest.mark.asyncio
async def test_rejected_future_is_thrown_in(scheduler):
    def task():
        try:
            yield rejected(ValueError("bad"), loop=scheduler.loop)
        except ValueError as exc:
            return f"handled {exc}"

    assert await scheduler.submit(task) == "handled bad"


@pytest.mark.asyncio
async def test_yielded_exception_is_thrown_back(scheduler):
    def task():
        try:
            yield RuntimeError("echo")
        except RuntimeError as exc:
            return str(exc)

    assert await scheduler.submit(task) == "echo"


@pytest.mark.asyncio
async def test_uncaught_exception_rejects_result(scheduler):
    def task():
        yield 1
        return 1 / 0

    with pytest.raises(ZeroDivisionError):
        await scheduler.submit(task)


@pytest.mark.asyncio
async def test_nested_generators_run_as_children(scheduler):
    def leaf(value):
        yield
        return value + 1

    def middle(value):
        return (yield leaf(value)) * 10

    def root():
        return (yield middle(1))

    assert await scheduler.submit(root) == 20


@pytest.mark.asyncio
async def test_child_failure_propagates_to_parent(scheduler):
    def child():
        yield
        raise KeyError("child")

    def parent():
        try:
            yield child()
        except KeyError:
            return "recovered"

    assert await scheduler.submit(parent) == "recovered"


@pytest.mark.asyncio
async def test_return_value_is_dispatched(scheduler):
    def child():
        yield
        return "child"

    def parent():
        yield
        return child()

    assert await scheduler.submit(parent) == "child"


@pytest.mark.asyncio
async def test_returned_future_is_awaited(scheduler):
    def task():
        yield
        return resolved("chained", loop=scheduler.loop)

    assert await scheduler.submit(task) == "chained"


@pytest.mark.asyncio
async def test_native_awaitables(scheduler):
    async def native():
        await asyncio.sleep(0.01)
        return "native"

    def task():
        return (yield native())

    assert await scheduler.submit(task) == "native"


@pytest.mark.asyncio
async def test_thread_futures(scheduler):
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:

        def task():
            return (yield pool.submit(lambda: "from thread"))

        assert await scheduler.submit(task) == "from thread"


@pytest.mark.asyncio
async def test_cancelled_asyncio_future_becomes_cancel_fault(scheduler):
    def task(future):
        try:
            yield future
        except CancelFault as fault:
            return fault.message

    future = scheduler.loop.create_future()
    scheduler.loop.call_later(0.01, future.cancel)

    assert await scheduler.submit(task, future) == "Future has been cancelled"


@pytest.mark.asyncio
async def test_plain_function_settles_without_scheduling(scheduler):
    result = scheduler.submit(lambda a, b: a + b, 1, 2)

    assert result.done()
    assert result.result() == 3
    assert not scheduler.ticking
    assert scheduler.runnable == ()


@pytest.mark.asyncio
async def test_plain_function_fault_is_rejected(scheduler):
    def broken():
        raise LookupError("nope")

    result = scheduler.submit(broken)

    assert isinstance(result.exception(), LookupError)


@pytest.mark.asyncio
async def test_generator_objects_can_be_submitted(scheduler):
    def task(value):
        yield
        return value

    assert await scheduler.submit(task("ready")) == "ready"

    with pytest.raises(TypeError):
        scheduler.submit(task("x"), "extra")


@pytest.mark.asyncio
async def test_non_callable_is_rejected(scheduler):
    with pytest.raises(TypeError):
        scheduler.submit(42)


@pytest.mark.asyncio
async def test_function_returning_exception_is_rejected(scheduler):
    result = scheduler.submit(lambda: ValueError("returned"))

    assert isinstance(result.exception(), ValueError)
