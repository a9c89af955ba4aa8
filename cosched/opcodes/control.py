"""Opcodes that end the yielding task early."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ._validators import ensure_int, ensure_str
from .base import Opcode


@dataclass(frozen=True)
class Cancel(Opcode):
    """Cancel the yielding task with ``CancelFault(message, code)``.

    Steps after the yield never run.
    """

    message: str
    code: int = 500

    def __post_init__(self) -> None:
        ensure_str(self.message, name="message")
        ensure_int(self.code, name="code")


@dataclass(frozen=True)
class Return(Opcode):
    """Settle the yielding task with ``value`` and skip its remaining steps."""

    value: Any = None


def cancel(message: str, code: int = 500) -> Cancel:
    return Cancel(message=message, code=code)


def return_value(value: Any = None) -> Return:
    """Finish the current task with ``value``.

    Mostly useful inside nested generators and one-liners; a plain ``return``
    statement has the same effect at the end of a generator.
    """
    return Return(value=value)


__all__ = ["Cancel", "Return", "cancel", "return_value"]
