"""Handlers for Pause and Deadline."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from cosched.loop import delay

if TYPE_CHECKING:
    from cosched.coroutine import CoroutineLike
    from cosched.opcodes import Deadline, Pause
    from cosched.scheduler import Scheduler


def handle_pause(opcode: Pause, coroutine: CoroutineLike, scheduler: Scheduler) -> Any:
    return delay(scheduler.loop, opcode.seconds)


def handle_deadline(opcode: Deadline, coroutine: CoroutineLike, scheduler: Scheduler) -> Any:
    coroutine.set_deadline(opcode.seconds)
    return None


__all__ = ["handle_pause", "handle_deadline"]
