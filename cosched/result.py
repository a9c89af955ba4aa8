"""
Outcome types for the non-raising blocking API.

``Scheduler.submit_blocking_safe`` hands back a :class:`RunResult` holding
either :class:`Ok` (the task's value) or :class:`Err` (its fault) together
with the wall-clock time the task took.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, NoReturn, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: Exception

    def unwrap(self) -> NoReturn:
        raise self.error


Result = Union[Ok[T], Err]


@dataclass(frozen=True)
class RunResult(Generic[T]):
    """What a task settled with and how long it ran."""

    result: Result[T]
    elapsed: float = 0.0

    @property
    def is_ok(self) -> bool:
        return isinstance(self.result, Ok)

    @property
    def is_err(self) -> bool:
        return isinstance(self.result, Err)

    @property
    def value(self) -> Any:
        """The task's value, or ``None`` if it failed."""
        return self.result.value if isinstance(self.result, Ok) else None

    @property
    def error(self) -> Exception | None:
        return self.result.error if isinstance(self.result, Err) else None

    def unwrap(self) -> T:
        """Return the value or raise the fault."""
        return self.result.unwrap()

    def unwrap_err(self) -> Exception:
        if isinstance(self.result, Err):
            return self.result.error
        raise RuntimeError(f"task succeeded with {self.result.value!r}")

    def display(self) -> str:
        return f"{self.result!r} in {self.elapsed:.3f}s"


__all__ = ["Result", "Ok", "Err", "RunResult"]
