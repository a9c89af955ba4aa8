"""Process-wide default scheduler and module-level entry points.

Most programs need exactly one scheduler. ``init_scheduler`` creates it with
explicit configuration, ``get_scheduler`` returns it (creating a default one
on first use) and ``shutdown_scheduler`` tears it down. The ``submit*``
functions below delegate to it.

Usage:
    from cosched import pause, submit_blocking

    def job():
        yield pause(0.5)
        return 42

    assert submit_blocking(job) == 42
"""

from __future__ import annotations

import logging
from typing import Any

from cosched.promise import Promise
from cosched.result import RunResult
from cosched.scheduler import Scheduler

logger = logging.getLogger(__name__)

_scheduler: Scheduler | None = None


def init_scheduler(**config: Any) -> Scheduler:
    """Replace the default scheduler with one built from ``config``.

    ``config`` takes the keyword arguments of :class:`Scheduler`.
    """
    global _scheduler
    if _scheduler is not None:
        _scheduler.close()
    _scheduler = Scheduler(**config)
    logger.debug("initialised default scheduler %r", _scheduler)
    return _scheduler


def get_scheduler() -> Scheduler:
    global _scheduler
    if _scheduler is None:
        _scheduler = Scheduler()
    elif _scheduler._loop is not None and _scheduler._loop.is_closed():
        logger.debug("default scheduler %r lost its loop, replacing it", _scheduler)
        _scheduler.close()
        _scheduler = Scheduler()
    return _scheduler


def shutdown_scheduler() -> None:
    global _scheduler
    if _scheduler is not None:
        _scheduler.close()
        _scheduler = None


def submit(fn: Any, /, *args: Any, **kwargs: Any) -> Promise:
    return get_scheduler().submit(fn, *args, **kwargs)


def submit_fire_and_forget(fn: Any, /, *args: Any, **kwargs: Any) -> None:
    get_scheduler().submit_fire_and_forget(fn, *args, **kwargs)


def submit_delayed(seconds: float, fn: Any, /, *args: Any, **kwargs: Any) -> Promise:
    return get_scheduler().submit_delayed(seconds, fn, *args, **kwargs)


def submit_blocking(fn: Any, /, *args: Any, timeout: float = 0, **kwargs: Any) -> Any:
    return get_scheduler().submit_blocking(fn, *args, timeout=timeout, **kwargs)


def submit_blocking_safe(
    fn: Any, /, *args: Any, timeout: float = 0, **kwargs: Any
) -> RunResult[Any]:
    return get_scheduler().submit_blocking_safe(fn, *args, timeout=timeout, **kwargs)


__all__ = [
    "init_scheduler",
    "get_scheduler",
    "shutdown_scheduler",
    "submit",
    "submit_fire_and_forget",
    "submit_delayed",
    "submit_blocking",
    "submit_blocking_safe",
]
