"""Typed results that record whether a value came from live data or a fallback."""

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Live(BaseModel, Generic[T]):
    """Value produced from live chain data."""

    value: T
    degraded: Literal[False] = False


class Degraded(BaseModel, Generic[T]):
    """Fallback value produced because live data was unavailable."""

    value: T
    reason: str
    degraded: Literal[True] = True


type Outcome[T] = Live[T] | Degraded[T]


__all__ = [
    "Degraded",
    "Live",
    "Outcome",
]
