"""Aggregate position exposure and margin for a single account snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from ..models import AccountBalanceSnapshot, PerPositionMetrics, PositionAsset, TokenAsset
from .coercion import coerce_float
from .entry_price import position_entry_price, position_size
from .margin_ratio import MarginRatioCalculator, calculate_margin_ratio, safe_margin_ratio

logger = logging.getLogger(__name__)


@dataclass
class PositionExposure:
    margin_balance_usd: float = 0.0
    signed_notional_usd: float = 0.0
    maintenance_margin_usd: float = 0.0
    initial_margin_usd: float = 0.0
    average_leverage: float = 0.0
    has_perp_exposure: bool = False
    per_position: List[PerPositionMetrics] = field(default_factory=list)

    @property
    def total_position_notional_usd(self) -> float:
        return abs(self.signed_notional_usd)


class PositionAggregator:
    """Single pass over the snapshot's assets collecting margin and exposure."""

    def __init__(self, margin_ratio: Optional[MarginRatioCalculator] = None) -> None:
        self._margin_ratio = margin_ratio or calculate_margin_ratio

    def aggregate(
        self,
        snapshot: AccountBalanceSnapshot,
        account_balance_usd: float,
        is_cross_margin: bool,
        current_prices: Optional[Mapping[str, Any]] = None,
    ) -> PositionExposure:
        """Collect exposure; ``account_balance_usd`` feeds each margin ratio as-is."""

        prices = current_prices if isinstance(current_prices, Mapping) else {}
        exposure = PositionExposure()
        weighted_lev_numerator = 0.0
        weighted_lev_denominator = 0.0
        for asset in snapshot.assets:
            if isinstance(asset, TokenAsset):
                exposure.margin_balance_usd += coerce_float(asset.margin_balance)
            elif isinstance(asset, PositionAsset):
                exposure.has_perp_exposure = True
                notional = coerce_float(asset.notional)
                abs_notional = abs(notional)
                # Signed so directional bias stays recoverable.
                exposure.signed_notional_usd += notional
                exposure.maintenance_margin_usd += coerce_float(asset.maint_margin)
                exposure.initial_margin_usd += coerce_float(asset.initial_margin)
                if asset.leverage is not None:
                    weighted_lev_numerator += abs_notional * coerce_float(asset.leverage)
                    weighted_lev_denominator += abs_notional
                exposure.per_position.append(
                    self._position_metrics(asset, account_balance_usd, is_cross_margin, prices)
                )

        if weighted_lev_denominator > 0:
            exposure.average_leverage = weighted_lev_numerator / weighted_lev_denominator
        return exposure

    def _position_metrics(
        self,
        position: PositionAsset,
        account_balance_usd: float,
        is_cross_margin: bool,
        prices: Mapping[str, Any],
    ) -> PerPositionMetrics:
        maint_margin = coerce_float(position.maint_margin)
        margin_balance = coerce_float(position.margin_balance)
        return PerPositionMetrics(
            symbol=position.symbol,
            notional=abs(coerce_float(position.notional)),
            leverage=coerce_float(position.leverage),
            maint_margin=maint_margin,
            margin_balance=margin_balance,
            buffer=max(0.0, margin_balance - maint_margin),
            margin_ratio_pct=safe_margin_ratio(
                self._margin_ratio, position, account_balance_usd, is_cross_margin
            ),
            avg_entry_price=position_entry_price(position),
            current_price=coerce_float(prices.get(position.symbol)),
            size=position_size(position),
        )
