"""The await-all combinator.

``await_all`` turns a list or mapping of futures into one promise that
fulfills once every member has settled, whether it fulfilled or rejected.
Failed members are data at this layer: their exception is stored at their
key and the aggregate still fulfills.
"""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Mapping
from typing import Any

from cosched.errors import CancelFault
from cosched.promise import CancellationQueue, Promise, settled_value


def await_all(
    futures: Mapping[Any, asyncio.Future] | list[asyncio.Future],
    *,
    loop: asyncio.AbstractEventLoop | None = None,
) -> Promise:
    """Wait for every future in ``futures``.

    Returns a promise of a ``dict`` (for mapping input) or a ``list`` (for
    list input) with the same keys in the same order, each holding the
    member's value, exception, or ``CancelFault`` if it was cancelled.

    Cancelling the returned promise cancels every member that is still
    pending and rejects the aggregate with ``CancelFault``.
    """
    if isinstance(futures, Mapping):
        keyed = list(futures.items())
        results: dict[Any, Any] | list[Any] = dict.fromkeys(key for key, _ in keyed)
    else:
        keyed = list(enumerate(futures))
        results = [None] * len(keyed)

    if loop is None:
        loop = keyed[0][1].get_loop() if keyed else asyncio.get_running_loop()

    canceller = CancellationQueue()

    def _cancel() -> None:
        canceller()
        raise CancelFault("Awaitable promise has been cancelled")

    aggregate = Promise(_cancel, loop=loop)
    if not keyed:
        aggregate.set_result(results)
        return aggregate

    remaining = len(keyed)

    def _member_settled(key: Any, future: asyncio.Future) -> None:
        nonlocal remaining
        value = settled_value(future)
        if aggregate.done():
            return
        results[key] = value
        remaining -= 1
        if remaining == 0:
            aggregate.set_result(results)

    for key, future in keyed:
        future.add_done_callback(functools.partial(_member_settled, key))
        canceller.enqueue(future)
    return aggregate


__all__ = ["await_all"]
