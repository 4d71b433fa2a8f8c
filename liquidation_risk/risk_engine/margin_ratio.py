"""Per-position margin ratio calculation and display bands.

The margin ratio is the share of the relevant equity consumed by maintenance
margin, expressed as a percentage:

* cross margin accounts, cross positions: ``maint_margin / account value``
  where the account value is shared by every cross position;
* cross margin accounts, isolated positions: ``maint_margin / (isolated
  margin + unrealized PnL)``;
* conventional accounts: ``maint_margin / wallet balance`` where the wallet
  balance falls back to the absolute notional.

The risk scorer's multipliers assume this scale, so any replacement
calculator must return values on it.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Callable, Optional

from ..models import MarginMode, PositionAsset
from .coercion import coerce_float

logger = logging.getLogger(__name__)

MarginRatioCalculator = Callable[[PositionAsset, float, bool], float]

ISOLATED_MODES = frozenset({MarginMode.ISOLATED.value, MarginMode.SPOT_ISOLATED.value})

# Reported when the equity backing a position is exhausted.
FULLY_AT_RISK_PCT = 100.0


def calculate_margin_ratio(
    position: PositionAsset,
    account_balance_usd: float = 0.0,
    is_cross_margin: bool = False,
) -> float:
    maint_margin = coerce_float(position.maint_margin)
    margin_balance = coerce_float(position.margin_balance)
    unrealized = coerce_float(position.unrealized_profit)
    notional = abs(coerce_float(position.notional))
    margin_mode = position.margin_mode or MarginMode.CROSS.value

    if is_cross_margin:
        if margin_mode in ISOLATED_MODES:
            isolated_value = margin_balance + unrealized
            if isolated_value <= 0:
                return FULLY_AT_RISK_PCT
            return maint_margin / isolated_value * 100
        balance = coerce_float(account_balance_usd)
        if balance <= 0:
            return FULLY_AT_RISK_PCT
        return maint_margin / balance * 100

    wallet_balance = margin_balance if margin_balance > 0 else notional
    if wallet_balance > 0:
        return maint_margin / wallet_balance * 100
    return 0.0


def safe_margin_ratio(
    calculator: MarginRatioCalculator,
    position: PositionAsset,
    account_balance_usd: float,
    is_cross_margin: bool,
) -> float:
    """Call ``calculator`` and substitute 0 for errors or off-scale results."""

    try:
        value = calculator(position, account_balance_usd, is_cross_margin)
    except Exception as exc:
        logger.warning(
            "Margin ratio calculation failed for %s; using 0",
            position.symbol,
            extra={"symbol": position.symbol, "error": str(exc)},
        )
        return 0.0
    ratio = coerce_float(value, fallback=math.nan)
    if math.isnan(ratio) or ratio < 0:
        logger.warning(
            "Margin ratio %r for %s is not a non-negative number; using 0",
            value,
            position.symbol,
            extra={"symbol": position.symbol},
        )
        return 0.0
    return ratio


class MarginRatioBand(str, Enum):
    NEUTRAL = "neutral"
    VERY_SAFE = "very_safe"
    SAFE = "safe"
    MODERATE = "moderate"
    RISKY = "risky"
    VERY_RISKY = "very_risky"


def margin_ratio_band(margin_ratio_pct: Optional[float]) -> MarginRatioBand:
    if not margin_ratio_pct:
        return MarginRatioBand.NEUTRAL
    if margin_ratio_pct <= 5:
        return MarginRatioBand.VERY_SAFE
    if margin_ratio_pct <= 10:
        return MarginRatioBand.SAFE
    if margin_ratio_pct <= 15:
        return MarginRatioBand.MODERATE
    if margin_ratio_pct <= 25:
        return MarginRatioBand.RISKY
    return MarginRatioBand.VERY_RISKY


def margin_mode_description(margin_mode: Optional[str]) -> str:
    if margin_mode in ISOLATED_MODES:
        return "Isolated"
    return "Cross"
