"""Base class shared by every opcode."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Opcode:
    """A control request a task yields to talk to the scheduler about itself.

    Opcodes are inert values: they hold no reference to a scheduler or a
    coroutine. The scheduler looks up a handler for the opcode's type and
    lets it act on the yielding coroutine.
    """


__all__ = ["Opcode"]
