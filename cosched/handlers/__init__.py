"""Opcode handlers for the cosched scheduler.

Each handler has the signature::

    def handler(
        opcode: Opcode,
        coroutine: CoroutineLike,
        scheduler: Scheduler,
    ) -> Any

and returns the value the scheduler dispatches next for the coroutine
(``None`` resumes it immediately, a future suspends it). Handlers that settle
the coroutine may return anything; their result is discarded.

Module Organization:
- time.py: handle_pause, handle_deadline
- control.py: handle_cancel, handle_return
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from cosched.handlers.control import handle_cancel, handle_return
from cosched.handlers.time import handle_deadline, handle_pause

if TYPE_CHECKING:
    from cosched.coroutine import CoroutineLike
    from cosched.opcodes import Opcode
    from cosched.scheduler import Scheduler

OpcodeHandler = Callable[["Opcode", "CoroutineLike", "Scheduler"], Any]
OpcodeHandlers = Mapping[type, OpcodeHandler]


def default_opcode_handlers() -> dict[type, OpcodeHandler]:
    """Return the handlers for the built-in opcodes, keyed by opcode type."""
    from cosched.opcodes import Cancel, Deadline, Pause, Return

    return {
        Pause: handle_pause,
        Deadline: handle_deadline,
        Cancel: handle_cancel,
        Return: handle_return,
    }


def resolve_handler(handlers: OpcodeHandlers, opcode: Any) -> OpcodeHandler | None:
    """Find the handler for ``opcode``, walking its MRO."""
    for klass in type(opcode).__mro__:
        handler = handlers.get(klass)
        if handler is not None:
            return handler
    return None


__all__ = [
    "OpcodeHandler",
    "OpcodeHandlers",
    "default_opcode_handlers",
    "resolve_handler",
    "handle_pause",
    "handle_deadline",
    "handle_cancel",
    "handle_return",
]
