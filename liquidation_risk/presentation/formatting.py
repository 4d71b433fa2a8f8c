"""Formatting helpers used by the risk panel renderer."""

from __future__ import annotations

import math
from typing import Optional

__all__ = [
    "format_compact_usd",
    "format_currency",
    "format_entry_price",
    "format_margin_ratio",
    "format_score",
]


def format_currency(value: float) -> str:
    return f"${value:,.2f}"


def format_compact_usd(value: Optional[float]) -> str:
    """Dollar amount with K/M/B suffixes, e.g. ``$12.5K``."""

    if value is None or math.isnan(value):
        return "$N/A"
    magnitude = abs(value)
    for threshold, suffix in ((1e9, "B"), (1e6, "M"), (1e3, "K")):
        if magnitude >= threshold:
            return f"${value / threshold:,.2f}{suffix}"
    return f"${value:,.2f}"


def format_margin_ratio(margin_ratio_pct: Optional[float]) -> str:
    if not margin_ratio_pct:
        return "-"
    return f"{margin_ratio_pct:.1f}%"


def format_entry_price(entry_price: Optional[float]) -> str:
    if not entry_price:
        return "-"
    if abs(entry_price) >= 1:
        return f"{entry_price:,.2f}"
    return f"{entry_price:.6g}"


def format_score(score: float) -> str:
    return f"{score:g}%"
