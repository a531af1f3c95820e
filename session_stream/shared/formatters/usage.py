"""Token count and cost formatting for inline usage annotations."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from rich.text import Text

from session_stream.shared.formatters.styles import DIM
from session_stream.shared.models.usage import Usage, UsageTotals

_CENT = Decimal("0.01")


def format_number(n: int) -> str:
    """Compact token count: ``85178`` -> ``85.2k``, ``999`` -> ``999``."""
    if n < 1000:
        return str(n)
    try:
        return f"{n / 1000:.1f}k"
    except OverflowError:
        # Beyond float range: round to tenths of a thousand in integers.
        tenths = (n + 50) // 100
        return f"{tenths // 10}.{tenths % 10}k"


def format_cost(cost: float) -> str:
    """Dollar amount rounded half-up to whole cents."""
    if not math.isfinite(cost):
        return f"${cost:.2f}"
    try:
        cents = Decimal(repr(cost)).quantize(_CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return f"${cost:.2f}"
    return f"${cents}"


def format_token_usage(usage: Usage | None) -> Text:
    """Inline ``ctx | out | cost`` annotation for an agent header.

    Returns an empty ``Text`` when there is nothing worth showing.
    """
    if usage is None or usage.is_empty:
        return Text()
    summary = f"ctx: {format_number(usage.total_tokens)} | out: {usage.output}"
    if usage.cost is not None and usage.cost.total > 0:
        summary += f" | {format_cost(usage.cost.total)}"
    return Text.assemble(" ", (summary, DIM))


def format_totals(totals: UsageTotals) -> str:
    summary = f"Total: ctx: {format_number(totals.context)} | out: {format_number(totals.output)}"
    if totals.cost > 0:
        summary += f" | {format_cost(totals.cost)}"
    return summary
