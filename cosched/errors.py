"""Fault types raised and propagated by the cosched core."""

from __future__ import annotations

from typing import Any


class CoroutineError(Exception):
    """Base class for faults originating in the scheduler itself."""


class CancelFault(CoroutineError):
    """A task was cancelled.

    Raised into (and used to reject) a coroutine that was cancelled by the
    ``cancel`` opcode, by cancellation of its result future, or by its parent
    being cancelled while waiting on it.

    Attributes:
        message: Human readable reason.
        code: Numeric code, ``500`` unless the canceller chose another one.
    """

    default_code = 500

    def __init__(self, message: str = "", code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = self.default_code if code is None else code

    def __eq__(self, other: Any) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return (self.message, self.code) == (other.message, other.code)

    def __hash__(self) -> int:
        return hash((type(self), self.message, self.code))

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, {self.code!r})"


class TimeoutFault(CancelFault):
    """A coroutine outlived the deadline it set for itself."""

    default_code = 408

    def __init__(self, message: str = "", seconds: float | None = None) -> None:
        super().__init__(message)
        self.seconds = seconds

    @classmethod
    def after(cls, seconds: float | None) -> "TimeoutFault":
        return cls(f"Coroutine is timeout: {seconds}", seconds)


class UnhandledOpcodeError(CoroutineError, TypeError):
    """Raised when a yielded opcode has no registered handler."""

    def __init__(self, opcode: Any) -> None:
        self.opcode = opcode
        super().__init__(
            f"No handler registered for opcode {type(opcode).__name__}\n"
            "Hint: pass one via `Scheduler(handlers={OpcodeType: handler})`"
        )


__all__ = [
    "CoroutineError",
    "CancelFault",
    "TimeoutFault",
    "UnhandledOpcodeError",
]
