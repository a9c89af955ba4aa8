"""An instrumented coroutine variant.

Submit a task with ``scheduler.submit_as(TracingCoroutine, fn)`` to record
what it did; children spawned beneath it are traced as well.

Example:
    result = scheduler.submit_as(TracingCoroutine, worker)
    ...
    for before, after in coroutine.transitions:
        print(f"{before.value} -> {after.value}")
"""

from __future__ import annotations

import logging
from typing import Any

from cosched.coroutine import Coroutine, CoroutineState

logger = logging.getLogger(__name__)


class TracingCoroutine(Coroutine):
    """Coroutine that keeps a history of its state transitions and yields.

    Attributes:
        transitions: ``(from_state, to_state)`` pairs in the order they happened.
        yielded: Every value handed to the scheduler by :meth:`next_yield`.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self.transitions: list[tuple[CoroutineState, CoroutineState]] = []
        self.yielded: list[Any] = []
        self._state = CoroutineState.IDLE
        super().__init__(*args, **kwargs)

    @property
    def state(self) -> CoroutineState:
        return self._state

    @state.setter
    def state(self, value: CoroutineState) -> None:
        if value is not self._state:
            self.transitions.append((self._state, value))
            logger.debug("%s: %s -> %s", self.name, self._state.value, value.value)
        self._state = value

    def next_yield(self) -> Any:
        value = super().next_yield()
        self.yielded.append(value)
        logger.debug("%s yielded %r", self.name, value)
        return value

    @property
    def states(self) -> list[CoroutineState]:
        """Every state visited, starting with the initial one."""
        if not self.transitions:
            return [self._state]
        return [self.transitions[0][0]] + [after for _, after in self.transitions]


__all__ = ["TracingCoroutine"]
