"""
The per-task state machine.

A :class:`Coroutine` wraps one step-generator. The scheduler pulls the
generator's current yielded value with :meth:`Coroutine.next_yield`, decides
what it means, and either pushes a value straight back with
:meth:`Coroutine.resume` or parks the coroutine on a future with
:meth:`Coroutine.suspend_on`. When that future settles the coroutine resumes
itself from the future's callback; the next tick picks it up again.

States::

    WORKING  --suspend_on(f)-->  PROGRESS
    PROGRESS --f settles------>  WORKING
    any      --cancel/return/finish/fault--> SETTLED

``IDLE`` exists for completeness and is never entered.
"""

from __future__ import annotations

import asyncio
import logging
import time
import weakref
from collections.abc import Callable, Generator
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from cosched.errors import CancelFault
from cosched.promise import Promise, settled_value

logger = logging.getLogger(__name__)


class CoroutineState(Enum):
    IDLE = "idle"
    WORKING = "working"
    PROGRESS = "progress"
    SETTLED = "settled"


@runtime_checkable
class CoroutineLike(Protocol):
    """What the scheduler needs from a coroutine variant."""

    result: asyncio.Future
    state: CoroutineState

    @property
    def deadline_duration(self) -> float | None: ...

    def next_yield(self) -> Any: ...

    def resume(self, value: Any) -> None: ...

    def suspend_on(self, future: asyncio.Future) -> None: ...

    def cancel(self, fault: Exception | None = None) -> None: ...

    def force_settle(self, value: Any) -> None: ...

    def set_deadline(self, seconds: float) -> None: ...

    def is_expired(self) -> bool: ...


CoroutineFactory = Callable[..., CoroutineLike]


class Coroutine:
    """Default coroutine variant.

    Args:
        steps: The step-generator; owned exclusively by this coroutine.
        loop: Loop the result future belongs to.
    """

    def __init__(
        self,
        steps: Generator[Any, Any, Any],
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.steps = steps
        self.state = CoroutineState.WORKING
        self.result: Promise = Promise(self._cancelled_by_promise, loop=loop)
        self.result.add_done_callback(self._on_result_settled)
        self._suspended_on: weakref.ref[asyncio.Future] | None = None
        self._deadline: float | None = None
        self._deadline_duration: float | None = None
        self._started = False
        self._exhausted = False
        self._current: Any = None
        self._return_value: Any = None

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return getattr(self.steps, "__qualname__", None) or type(self.steps).__name__

    @property
    def settled(self) -> bool:
        return self.state is CoroutineState.SETTLED

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def suspended_on(self) -> asyncio.Future | None:
        if self._suspended_on is None:
            return None
        return self._suspended_on()

    def in_state(self, state: CoroutineState) -> bool:
        return self.state is state

    # ------------------------------------------------------------------
    # Deadline
    # ------------------------------------------------------------------

    def set_deadline(self, seconds: float) -> None:
        self._deadline_duration = seconds
        self._deadline = time.monotonic() + seconds

    def is_expired(self) -> bool:
        return self._deadline is not None and time.monotonic() > self._deadline

    @property
    def deadline_duration(self) -> float | None:
        return self._deadline_duration

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def next_yield(self) -> Any:
        """Return the value the generator currently yields.

        Primes the generator on first use. Once the generator is exhausted
        its return value is returned instead. A fault raised while priming
        is returned as the value; the generator is then exhausted, so
        resuming with it settles the coroutine.
        """
        if not self._started:
            self._started = True
            try:
                self._advance(self.steps.send, None)
            except Exception as exc:
                self._exhausted = True
                return exc
        if self._exhausted:
            return self._return_value
        return self._current

    def resume(self, value: Any) -> None:
        """Push ``value`` into the generator (a throw for exceptions).

        Settles the coroutine when the generator is already exhausted or
        raises while handling the value.
        """
        if self.settled:
            return
        if self._exhausted:
            self._settle(value)
            return
        self._started = True
        try:
            if isinstance(value, Exception):
                self._advance(self.steps.throw, value)
            else:
                self._advance(self.steps.send, value)
        except Exception as exc:
            self._exhausted = True
            # the step may have settled its own coroutine before raising
            if not self.settled:
                self._settle(exc)

    def _advance(self, method: Callable[[Any], Any], value: Any) -> None:
        try:
            self._current = method(value)
        except StopIteration as stop:
            self._exhausted = True
            self._current = None
            self._return_value = stop.value

    # ------------------------------------------------------------------
    # Suspension
    # ------------------------------------------------------------------

    def suspend_on(self, future: asyncio.Future) -> None:
        """Park the coroutine until ``future`` settles.

        Only one suspension may be outstanding; the call is ignored unless
        the coroutine is ``WORKING``.
        """
        if self.state is not CoroutineState.WORKING:
            return
        self.state = CoroutineState.PROGRESS
        self._suspended_on = weakref.ref(future)
        future.add_done_callback(self._on_suspension_settled)

    def _on_suspension_settled(self, future: asyncio.Future) -> None:
        value = settled_value(future)
        if self.suspended_on is future:
            self._suspended_on = None
        if self.state is CoroutineState.PROGRESS:
            self.state = CoroutineState.WORKING
        self.resume(value)

    def _release_suspension(self) -> None:
        future = self.suspended_on
        self._suspended_on = None
        if future is not None and not future.done():
            future.cancel()

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    def cancel(self, fault: Exception | None = None) -> None:
        """Settle with ``fault`` whatever the current state.

        The future the coroutine is suspended on, if any, is cancelled too;
        when that future is a child coroutine's result the cancellation
        carries on down the chain.
        """
        if fault is None:
            fault = CancelFault("Coroutine is cancelled")
        if not self.settled:
            self._settle(fault)
        self._release_suspension()

    def force_settle(self, value: Any) -> None:
        """Settle with ``value`` without touching the generator again."""
        if self.settled:
            return
        self._settle(value)

    def _settle(self, value: Any) -> None:
        assert not self.settled, f"{self!r} settled twice"
        self.state = CoroutineState.SETTLED
        if not self.result.done():
            if isinstance(value, Exception):
                self.result.set_exception(value)
            else:
                self.result.set_result(value)
        logger.debug("settled %r with %r", self, value)
        self._release_suspension()
        self._close_steps()

    def _close_steps(self) -> None:
        if getattr(self.steps, "gi_running", False):
            return
        try:
            self.steps.close()
        except Exception:
            logger.warning("error while closing %s", self.name, exc_info=True)

    def _cancelled_by_promise(self) -> None:
        self.cancel(CancelFault("Coroutine is cancelled by promise cancellation"))

    def _on_result_settled(self, result: asyncio.Future) -> None:
        # settled from outside: stop stepping and keep the outcome already set
        if not self.settled:
            self._settle(settled_value(result))
            return
        self._release_suspension()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} state={self.state.value}>"


__all__ = ["Coroutine", "CoroutineLike", "CoroutineFactory", "CoroutineState"]
