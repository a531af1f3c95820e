"""Token usage and cost models."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any


def as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return 0


def as_float(value: Any) -> float:
    """Finite float for ``value``; zero for anything else, huge ints included."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    try:
        result = float(value)
    except OverflowError:
        return 0.0
    return result if math.isfinite(result) else 0.0


@dataclass(frozen=True)
class Cost:
    """Dollar cost of one model turn. Only ``total`` is ever rendered."""

    input: float = 0.0
    output: float = 0.0
    cache_read: float = 0.0
    cache_write: float = 0.0
    total: float = 0.0

    @classmethod
    def from_dict(cls, data: Any) -> Cost | None:
        if not isinstance(data, dict):
            return None
        return cls(
            input=as_float(data.get("input")),
            output=as_float(data.get("output")),
            cache_read=as_float(data.get("cacheRead")),
            cache_write=as_float(data.get("cacheWrite")),
            total=as_float(data.get("total")),
        )


@dataclass(frozen=True)
class Usage:
    """Token accounting attached to an assistant event.

    Field names follow Python conventions; ``from_dict`` reads the camelCase
    keys used on the wire (``cacheRead``, ``totalTokens``, ...). Missing or
    mistyped counters default to zero.
    """

    input: int = 0
    output: int = 0
    cache_read: int = 0
    cache_write: int = 0
    total_tokens: int = 0
    cost: Cost | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Usage | None:
        if not isinstance(data, dict):
            return None
        return cls(
            input=as_int(data.get("input")),
            output=as_int(data.get("output")),
            cache_read=as_int(data.get("cacheRead")),
            cache_write=as_int(data.get("cacheWrite")),
            total_tokens=as_int(data.get("totalTokens")),
            cost=Cost.from_dict(data.get("cost")),
        )

    @property
    def is_empty(self) -> bool:
        return self.total_tokens == 0 and self.output == 0


@dataclass
class UsageTotals:
    """Running sums over a stream, added in the order lines are observed."""

    context: int = 0
    output: int = 0
    cost: float = 0.0
    events: int = 0

    def add(self, usage: Usage | None) -> None:
        if usage is None:
            return
        self.context += usage.total_tokens
        self.output += usage.output
        if usage.cost is not None:
            self.cost += usage.cost.total
        self.events += 1

    @property
    def has_tokens(self) -> bool:
        return self.context > 0 or self.output > 0
