"""Cancellable futures on top of :mod:`asyncio`.

The scheduler talks to the event loop exclusively through futures. Plain
``asyncio.Future`` objects only know one way of being cancelled; a
:class:`Promise` additionally carries a *canceller* which runs when somebody
calls :meth:`Promise.cancel` and may settle the promise with a richer outcome
(typically a :class:`~cosched.errors.CancelFault`) instead of the bare
``CANCELLED`` state.

Example:
    >>> loop = asyncio.new_event_loop()
    >>> p = Promise(lambda: print("cancelled!"), loop=loop)
    >>> p.cancel()
    cancelled!
    True
"""

from __future__ import annotations

import asyncio
import concurrent.futures
from collections.abc import Callable
from typing import Any, TypeVar

from cosched.errors import CancelFault

T = TypeVar("T")


class Promise(asyncio.Future):
    """An ``asyncio.Future`` with a cooperative cancellation hook.

    ``cancel()`` invokes ``canceller`` at most once. Whatever the canceller
    does to the promise wins: resolving or rejecting it from inside the
    canceller, or raising (which rejects the promise with the raised
    exception). If the promise is still pending afterwards it is cancelled the
    ordinary asyncio way.

    ``cancel()`` returns ``True`` only when the promise ends up in asyncio's
    cancelled state. A task awaiting a promise that the canceller settled
    otherwise therefore still receives ``CancelledError``.
    """

    def __init__(
        self,
        canceller: Callable[[], Any] | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        super().__init__(loop=loop)
        self._canceller = canceller

    def cancel(self, msg: Any = None) -> bool:
        if self.done():
            return False
        canceller, self._canceller = self._canceller, None
        if canceller is not None:
            try:
                canceller()
            except Exception as exc:
                if not self.done():
                    self.set_exception(exc)
        if self.done():
            return self.cancelled()
        return super().cancel(msg)


class CancellationQueue:
    """Collects futures and cancels all of them in one go.

    Futures enqueued after the queue has been triggered are cancelled right
    away.
    """

    def __init__(self) -> None:
        self._queue: list[asyncio.Future] = []
        self._started = False

    def enqueue(self, future: asyncio.Future) -> None:
        if self._started:
            future.cancel()
            return
        self._queue.append(future)

    def __call__(self) -> None:
        if self._started:
            return
        self._started = True
        while self._queue:
            future = self._queue.pop(0)
            if not future.done():
                future.cancel()

    def __len__(self) -> int:
        return len(self._queue)


def resolved(value: Any, *, loop: asyncio.AbstractEventLoop | None = None) -> Promise:
    """Return a promise already settled with ``value``.

    Exception instances produce a rejected promise.
    """
    promise = Promise(loop=loop)
    if isinstance(value, Exception):
        promise.set_exception(value)
    else:
        promise.set_result(value)
    return promise


def rejected(fault: Exception, *, loop: asyncio.AbstractEventLoop | None = None) -> Promise:
    if not isinstance(fault, Exception):
        raise TypeError(f"fault must be Exception, got {type(fault).__name__}")
    promise = Promise(loop=loop)
    promise.set_exception(fault)
    return promise


def settled_value(future: asyncio.Future) -> Any:
    """Return the outcome of a settled future as a plain value.

    Fulfilled futures give their result, rejected futures their exception and
    cancelled futures a ``CancelFault``. Reading the exception marks it as
    retrieved so asyncio does not report it as lost.
    """
    if future.cancelled():
        return CancelFault("Future has been cancelled")
    exc = future.exception()
    if exc is not None:
        return exc
    return future.result()


def as_future(awaitable: Any, *, loop: asyncio.AbstractEventLoop) -> asyncio.Future:
    """Bring any awaitable onto ``loop`` as an asyncio future."""
    if asyncio.isfuture(awaitable):
        return awaitable
    if isinstance(awaitable, concurrent.futures.Future):
        return asyncio.wrap_future(awaitable, loop=loop)
    return asyncio.ensure_future(awaitable, loop=loop)


__all__ = [
    "Promise",
    "CancellationQueue",
    "resolved",
    "rejected",
    "settled_value",
    "as_future",
]
