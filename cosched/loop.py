"""Event-loop timer primitives used by the scheduler.

Two things are needed from the loop: a repeating timer that drives
``Scheduler.tick`` and a one-shot delay expressed as a future.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from cosched.promise import Promise

logger = logging.getLogger(__name__)


class Ticker:
    """A repeating timer.

    With ``interval == 0`` the callback runs once per loop iteration through
    ``call_soon``; otherwise it is rescheduled with ``call_later``. The next
    run is scheduled *before* the callback executes, so a callback that calls
    :meth:`disarm` stops the ticker for good.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval: float,
        callback: Callable[[], object],
    ) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._handle: asyncio.Handle | None = None
        self.fired = 0

    @property
    def armed(self) -> bool:
        return self._handle is not None

    @property
    def interval(self) -> float:
        return self._interval

    def arm(self) -> None:
        if self._handle is None:
            self._schedule()

    def disarm(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule(self) -> None:
        if self._interval > 0:
            self._handle = self._loop.call_later(self._interval, self._fire)
        else:
            self._handle = self._loop.call_soon(self._fire)

    def _fire(self) -> None:
        self._schedule()
        self.fired += 1
        self._callback()

    def __repr__(self) -> str:
        return f"<Ticker interval={self._interval} armed={self.armed} fired={self.fired}>"


def arm_repeating_timer(
    loop: asyncio.AbstractEventLoop,
    interval: float,
    callback: Callable[[], object],
) -> Ticker:
    ticker = Ticker(loop, interval, callback)
    ticker.arm()
    logger.debug("armed repeating timer %r", ticker)
    return ticker


def disarm_timer(ticker: Ticker) -> None:
    ticker.disarm()
    logger.debug("disarmed repeating timer %r", ticker)


def delay(loop: asyncio.AbstractEventLoop, seconds: float) -> Promise:
    """Return a promise fulfilled with ``None`` once ``seconds`` have elapsed.

    Cancelling the promise cancels the underlying timer handle.
    """
    handle: asyncio.TimerHandle | None = None

    def _cancel() -> None:
        if handle is not None:
            handle.cancel()

    promise = Promise(_cancel, loop=loop)

    def _fire() -> None:
        if not promise.done():
            promise.set_result(None)

    handle = loop.call_later(seconds, _fire)
    return promise


__all__ = ["Ticker", "arm_repeating_timer", "disarm_timer", "delay"]
