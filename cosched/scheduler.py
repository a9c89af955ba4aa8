"""
Tick-driven dispatcher for step-generator tasks.

One :class:`Scheduler` owns the set of live coroutines and a single repeating
timer. Every tick it visits each coroutine once, in submission order:

1. settled coroutines are detached;
2. coroutines past their deadline are cancelled with ``TimeoutFault``;
3. coroutines waiting on a future are skipped (the future resumes them);
4. working coroutines have their current yielded value dispatched.

Dispatch looks at what was yielded:

- a future: suspend on it;
- a generator: spawn it as a child and suspend on the child's result;
- an opcode: run its handler, then dispatch whatever the handler produced;
- a list or mapping: join every member (see :func:`cosched.join.await_all`);
- an awaitable: wrap it in a future and suspend on that;
- anything else (exceptions included): send it straight back.

The timer is only armed while there is something to run.

Example:
    >>> def greet(name):
    ...     yield pause(0.1)
    ...     return f"hello {name}"
    >>> with Scheduler() as scheduler:
    ...     scheduler.submit_blocking(greet, "world")
    'hello world'
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from collections.abc import Generator, Mapping
from typing import Any

from cosched.classification import YieldKind, classify, is_step_generator
from cosched.coroutine import Coroutine, CoroutineFactory, CoroutineLike, CoroutineState
from cosched.errors import CancelFault, TimeoutFault, UnhandledOpcodeError
from cosched.handlers import OpcodeHandlers, default_opcode_handlers, resolve_handler
from cosched.join import await_all
from cosched.loop import Ticker, arm_repeating_timer, disarm_timer
from cosched.opcodes import Opcode, pause
from cosched.promise import Promise, as_future, rejected, resolved
from cosched.result import Err, Ok, RunResult

logger = logging.getLogger(__name__)


def _debug_from_env() -> bool:
    return os.environ.get("COSCHED_DEBUG", "").lower() in ("1", "true", "yes")


def _collect(item: Any) -> Generator[Any, Any, Any]:
    return (yield item)


class Scheduler:
    """Cooperative round-robin scheduler.

    Args:
        loop: Event loop to run on. When omitted the scheduler binds to the
            running loop on first use, or creates (and owns) a new loop if
            none is running.
        coroutine_factory: Default coroutine variant, called as
            ``factory(generator, loop=loop)``.
        handlers: Extra opcode handlers, merged over the built-in ones.
        tick_interval: Seconds between ticks; ``0`` ticks on every loop
            iteration.
        debug: Log every dispatch at DEBUG level. Defaults to the
            ``COSCHED_DEBUG`` environment variable.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        *,
        coroutine_factory: CoroutineFactory = Coroutine,
        handlers: OpcodeHandlers | None = None,
        tick_interval: float = 0.0,
        debug: bool | None = None,
    ) -> None:
        if not callable(coroutine_factory):
            raise TypeError(
                f"coroutine_factory must be callable, got {type(coroutine_factory).__name__}"
            )
        if tick_interval < 0:
            raise ValueError(f"tick_interval must be non-negative, got {tick_interval}")
        self._loop = loop
        self._owns_loop = False
        self._factory = coroutine_factory
        self._handlers = {**default_opcode_handlers(), **(handlers or {})}
        self._tick_interval = tick_interval
        self._debug = _debug_from_env() if debug is None else debug
        self._runnable: dict[CoroutineLike, CoroutineFactory] = {}
        self._ticker: Ticker | None = None
        self.ticks = 0

    def __repr__(self) -> str:
        return "<%s@0x%X runnable:%s ticking:%s ticks:%s>" % (
            self.__class__.__name__,
            id(self),
            len(self._runnable),
            self.ticking,
            self.ticks,
        )

    def __enter__(self) -> "Scheduler":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError:
                self._loop = asyncio.new_event_loop()
                self._owns_loop = True
        return self._loop

    @property
    def ticking(self) -> bool:
        return self._ticker is not None

    @property
    def runnable(self) -> tuple[CoroutineLike, ...]:
        return tuple(self._runnable)

    @property
    def handlers(self) -> OpcodeHandlers:
        return dict(self._handlers)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, fn: Any, /, *args: Any, **kwargs: Any) -> Promise:
        """Run ``fn(*args, **kwargs)`` as a task and return its result future.

        ``fn`` not returning a generator never touches the scheduler: its
        return value (or the exception it raises) comes back as an already
        settled future.
        """
        return self._start(self._factory, fn, args, kwargs)[0]

    def submit_as(
        self,
        factory: CoroutineFactory,
        fn: Any,
        /,
        *args: Any,
        **kwargs: Any,
    ) -> Promise:
        """Like :meth:`submit`, wrapping the task in a custom coroutine variant.

        Child tasks spawned beneath it use the same variant.
        """
        if not callable(factory):
            raise TypeError(f"factory must be callable, got {type(factory).__name__}")
        return self._start(factory, fn, args, kwargs)[0]

    def submit_fire_and_forget(self, fn: Any, /, *args: Any, **kwargs: Any) -> None:
        """Run ``fn`` as a task without handing back its future.

        Failures are logged since nobody else will see them.
        """
        result = self.submit(fn, *args, **kwargs)
        result.add_done_callback(_log_unobserved)

    def submit_delayed(
        self,
        seconds: float,
        fn: Any,
        /,
        *args: Any,
        **kwargs: Any,
    ) -> Promise:
        """Submit ``fn`` after ``seconds``.

        Cancelling the returned future before the delay elapses means ``fn``
        is never called; afterwards the cancellation is passed on to the task.
        """
        def _delayed() -> Generator[Any, Any, Any]:
            yield pause(seconds)
            return self.submit(fn, *args, **kwargs)

        return self.submit(_delayed)

    def submit_blocking(
        self,
        fn: Any,
        /,
        *args: Any,
        timeout: float = 0,
        **kwargs: Any,
    ) -> Any:
        """Run the loop until the task settles; return its value or raise its fault.

        With ``timeout > 0`` the task is cancelled with ``TimeoutFault`` once
        the timeout elapses. Must not be called while the loop is running.
        """
        loop = self.loop
        if loop.is_running():
            raise RuntimeError(
                "submit_blocking() cannot be called while the event loop is running"
            )
        result, coroutine = self._start(self._factory, fn, args, kwargs)
        timer = None
        if timeout and coroutine is not None:
            timer = loop.call_later(timeout, self._expire, coroutine, timeout)
        try:
            return loop.run_until_complete(result)
        finally:
            if timer is not None:
                timer.cancel()

    def submit_blocking_safe(
        self,
        fn: Any,
        /,
        *args: Any,
        timeout: float = 0,
        **kwargs: Any,
    ) -> RunResult[Any]:
        """Like :meth:`submit_blocking`, returning a ``RunResult`` instead of raising."""
        if self.loop.is_running():
            raise RuntimeError(
                "submit_blocking_safe() cannot be called while the event loop is running"
            )
        started = time.monotonic()
        try:
            value = self.submit_blocking(fn, *args, timeout=timeout, **kwargs)
        except Exception as exc:
            return RunResult(Err(exc), time.monotonic() - started)
        return RunResult(Ok(value), time.monotonic() - started)

    def _start(
        self,
        factory: CoroutineFactory,
        fn: Any,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> tuple[Promise, CoroutineLike | None]:
        if is_step_generator(fn):
            if args or kwargs:
                raise TypeError("arguments cannot be passed to an already created generator")
            steps = fn
        else:
            if not callable(fn):
                raise TypeError(f"fn must be callable or a generator, got {type(fn).__name__}")
            try:
                steps = fn(*args, **kwargs)
            except Exception as exc:
                return rejected(exc, loop=self.loop), None
        if not is_step_generator(steps):
            return resolved(steps, loop=self.loop), None
        coroutine = self._spawn(steps, factory)
        return coroutine.result, coroutine

    def _spawn(self, steps: Generator[Any, Any, Any], factory: CoroutineFactory) -> CoroutineLike:
        coroutine = factory(steps, loop=self.loop)
        if not isinstance(coroutine, CoroutineLike):
            steps.close()
            raise TypeError(f"factory returned {type(coroutine).__name__}, not a coroutine")
        self._runnable[coroutine] = factory
        if self._ticker is None:
            self._ticker = arm_repeating_timer(self.loop, self._tick_interval, self.tick)
        logger.debug("spawned %r", coroutine)
        return coroutine

    def _expire(self, coroutine: CoroutineLike, seconds: float) -> None:
        if coroutine.state is not CoroutineState.SETTLED:
            self.cancel_coroutine(coroutine, TimeoutFault.after(seconds))

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """Advance every ready coroutine by exactly one step."""
        if not self._runnable:
            self._disarm()
            return
        self.ticks += 1
        for coroutine in list(self._runnable):
            if coroutine.state is CoroutineState.SETTLED:
                self._detach(coroutine)
            elif coroutine.is_expired():
                self.cancel_coroutine(coroutine, TimeoutFault.after(coroutine.deadline_duration))
            elif coroutine.state is CoroutineState.PROGRESS:
                continue
            else:
                try:
                    self.dispatch(coroutine, coroutine.next_yield())
                except Exception as exc:
                    logger.debug("step of %r raised %r", coroutine, exc)
                    self.cancel_coroutine(coroutine, exc)
        if not self._runnable:
            self._disarm()

    def cancel_coroutine(self, coroutine: CoroutineLike, fault: Exception) -> None:
        """Cancel ``coroutine`` with ``fault`` and stop scheduling it."""
        coroutine.cancel(fault)
        self._detach(coroutine)

    def _detach(self, coroutine: CoroutineLike) -> None:
        if self._runnable.pop(coroutine, None) is not None:
            logger.debug("detached %r", coroutine)

    def _disarm(self) -> None:
        if self._ticker is not None:
            disarm_timer(self._ticker)
            self._ticker = None

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, coroutine: CoroutineLike, value: Any) -> None:
        """Interpret ``value`` yielded by ``coroutine``."""
        kind = classify(value)
        if self._debug:
            logger.debug("dispatch %r <- %s %r", coroutine, kind.value, value)

        match kind:
            case YieldKind.FUTURE:
                coroutine.suspend_on(value)
            case YieldKind.AWAITABLE:
                coroutine.suspend_on(as_future(value, loop=self.loop))
            case YieldKind.CHILD:
                child = self._spawn(value, self._variant_of(coroutine))
                coroutine.suspend_on(child.result)
            case YieldKind.OPCODE:
                produced = self._run_opcode(coroutine, value)
                if coroutine.state is CoroutineState.SETTLED:
                    return
                self.dispatch(coroutine, produced)
            case YieldKind.COLLECTION:
                coroutine.suspend_on(self._join(value, self._variant_of(coroutine)))
            case _:
                coroutine.resume(value)

    def _variant_of(self, coroutine: CoroutineLike) -> CoroutineFactory:
        return self._runnable.get(coroutine, self._factory)

    def _run_opcode(self, coroutine: CoroutineLike, opcode: Opcode) -> Any:
        handler = resolve_handler(self._handlers, opcode)
        if handler is None:
            return rejected(UnhandledOpcodeError(opcode), loop=self.loop)
        try:
            return handler(opcode, coroutine, self)
        except Exception as exc:
            return rejected(exc, loop=self.loop)

    def _join(
        self,
        items: Mapping[Any, Any] | list[Any],
        factory: CoroutineFactory,
    ) -> Promise:
        if isinstance(items, Mapping):
            futures: dict[Any, Any] | list[Any] = {
                key: self._normalize(item, factory) for key, item in items.items()
            }
        else:
            futures = [self._normalize(item, factory) for item in items]
        return await_all(futures, loop=self.loop)

    def _normalize(self, item: Any, factory: CoroutineFactory) -> asyncio.Future:
        match classify(item):
            case YieldKind.FUTURE:
                return item
            case YieldKind.AWAITABLE:
                return as_future(item, loop=self.loop)
            case YieldKind.CHILD:
                return self._spawn(item, factory).result
            case YieldKind.COLLECTION | YieldKind.OPCODE:
                return self._spawn(_collect(item), factory).result
            case _:
                future = Promise(loop=self.loop)
                future.set_result(item)
                return future

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Cancel every live coroutine, stop ticking and release an owned loop."""
        if self._loop is not None and not self._loop.is_closed():
            for coroutine in list(self._runnable):
                coroutine.cancel(CancelFault("scheduler closed"))
        self._runnable.clear()
        self._disarm()
        if self._owns_loop and self._loop is not None and not self._loop.is_closed():
            self._loop.close()


def _log_unobserved(result: asyncio.Future) -> None:
    if result.cancelled():
        return
    exc = result.exception()
    if exc is None:
        return
    if isinstance(exc, CancelFault):
        logger.debug("fire-and-forget task cancelled: %r", exc)
    else:
        logger.warning("fire-and-forget task failed: %r", exc, exc_info=exc)


__all__ = ["Scheduler"]
