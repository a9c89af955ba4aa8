"""Time related opcodes.

- Pause: suspend the yielding task for a duration
- Deadline: give the yielding task a maximum remaining lifetime

Usage:
    def worker():
        yield deadline(5)      # cancelled with TimeoutFault after 5s
        yield pause(0.2)       # resumes roughly 0.2s later
        return "done"
"""

from __future__ import annotations

from dataclasses import dataclass

from ._validators import ensure_seconds
from .base import Opcode


@dataclass(frozen=True)
class Pause(Opcode):
    """Suspend the task for ``seconds``, then resume it with ``None``."""

    seconds: float

    def __post_init__(self) -> None:
        ensure_seconds(self.seconds, name="seconds")


@dataclass(frozen=True)
class Deadline(Opcode):
    """Set an absolute expiry ``seconds`` from now on the yielding task.

    The deadline is sampled by the scheduler on every tick, including while
    the task waits on a future; once passed the task is cancelled with a
    ``TimeoutFault``. Yielding it again replaces the previous deadline.
    """

    seconds: float

    def __post_init__(self) -> None:
        ensure_seconds(self.seconds, name="seconds")


def pause(seconds: float) -> Pause:
    """Suspend the current task for ``seconds``.

    Example:
        def program():
            yield pause(1.5)
            return "woke up"
    """
    return Pause(seconds=seconds)


def deadline(seconds: float) -> Deadline:
    return Deadline(seconds=seconds)


__all__ = ["Pause", "Deadline", "pause", "deadline"]
