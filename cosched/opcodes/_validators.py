"""Runtime validators for opcode attribute type checking."""

from __future__ import annotations

from numbers import Real


def _type_name(value: object) -> str:
    return type(value).__name__


def ensure_str(value: object, *, name: str) -> None:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be str, got {_type_name(value)}")


def ensure_int(value: object, *, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be int, got {_type_name(value)}")


def ensure_seconds(value: object, *, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(f"{name} must be a real number, got {_type_name(value)}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


__all__ = ["ensure_str", "ensure_int", "ensure_seconds"]
