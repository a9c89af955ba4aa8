"""Classification of values yielded by a task.

Every value a step-generator yields (or returns) falls into exactly one
:class:`YieldKind`; the scheduler decides once per dispatch and never
inspects the value again.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
from collections.abc import Generator, Mapping
from enum import Enum
from typing import Any

from cosched.opcodes import Opcode


class YieldKind(Enum):
    FUTURE = "future"
    CHILD = "child"
    OPCODE = "opcode"
    COLLECTION = "collection"
    AWAITABLE = "awaitable"
    FAULT = "fault"
    VALUE = "value"


def is_step_generator(value: Any) -> bool:
    return isinstance(value, Generator)


def is_collection(value: Any) -> bool:
    """Lists (keyed by index) and mappings are joined; tuples are plain values."""
    return isinstance(value, (list, Mapping))


def classify(value: Any) -> YieldKind:
    if asyncio.isfuture(value):
        return YieldKind.FUTURE
    if is_step_generator(value):
        return YieldKind.CHILD
    if isinstance(value, Opcode):
        return YieldKind.OPCODE
    if is_collection(value):
        return YieldKind.COLLECTION
    if isinstance(value, concurrent.futures.Future) or inspect.isawaitable(value):
        return YieldKind.AWAITABLE
    if isinstance(value, Exception):
        return YieldKind.FAULT
    return YieldKind.VALUE


__all__ = ["YieldKind", "classify", "is_step_generator", "is_collection"]
