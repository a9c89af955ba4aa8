"""Public opcode API for cosched."""

from __future__ import annotations

from .base import Opcode
from .control import Cancel, Return, cancel, return_value
from .time import Deadline, Pause, deadline, pause

__all__ = [
    "Opcode",
    # Time
    "Pause",
    "Deadline",
    "pause",
    "deadline",
    # Control
    "Cancel",
    "Return",
    "cancel",
    "return_value",
]
