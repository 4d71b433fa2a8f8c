"""Average entry price estimation for positions and portfolios."""

from __future__ import annotations

from typing import Iterable

from ..models import PerPositionMetrics, PositionAsset
from .coercion import coerce_float


def position_size(position: PositionAsset) -> float:
    """Signed contract size, falling back to ``amount`` when ``size`` is empty."""

    return coerce_float(position.size or position.amount)


def position_entry_price(position: PositionAsset) -> float:
    """Derive the entry price as ``|(notional - unrealized PnL) / size|``.

    ``notional`` is the current value of the position, so removing the
    unrealized PnL leaves the value at entry. Works for longs and shorts.
    Returns 0 when size or notional is missing.
    """

    size = position_size(position)
    notional = coerce_float(position.notional)
    pnl = coerce_float(position.unrealized_profit)
    if size != 0 and notional != 0:
        return abs((notional - pnl) / size)
    return 0.0


def estimate_entry_price(position: PositionAsset, current_price: float = 0.0) -> float:
    """Entry price for position tables, falling back to the mark price.

    Uses :func:`position_entry_price` when size and notional are known.
    Without a size there is no per-unit PnL to back out, so the current price
    (or 0 when unknown) is shown instead.
    """

    size = position_size(position)
    notional = coerce_float(position.notional)
    if size != 0 and notional != 0:
        return position_entry_price(position)
    return max(coerce_float(current_price), 0.0)


def average_entry_price(per_position: Iterable[PerPositionMetrics]) -> float:
    """Notional-weighted average entry price across positions with a known entry."""

    numerator = 0.0
    denominator = 0.0
    for position in per_position:
        if position.avg_entry_price > 0 and position.notional > 0:
            numerator += position.avg_entry_price * position.notional
            denominator += position.notional
    if denominator > 0:
        return numerator / denominator
    return 0.0
