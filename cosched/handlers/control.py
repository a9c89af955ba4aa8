"""Handlers for Cancel and Return."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from cosched.errors import CancelFault

if TYPE_CHECKING:
    from cosched.coroutine import CoroutineLike
    from cosched.opcodes import Cancel, Return
    from cosched.scheduler import Scheduler


def handle_cancel(opcode: Cancel, coroutine: CoroutineLike, scheduler: Scheduler) -> Any:
    scheduler.cancel_coroutine(coroutine, CancelFault(opcode.message, opcode.code))
    return None


def handle_return(opcode: Return, coroutine: CoroutineLike, scheduler: Scheduler) -> Any:
    coroutine.force_settle(opcode.value)
    return None


__all__ = ["handle_cancel", "handle_return"]
