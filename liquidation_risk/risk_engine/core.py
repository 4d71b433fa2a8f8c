"""Liquidation risk metrics for a single account snapshot."""

from __future__ import annotations

import logging
import threading
from typing import Any, Mapping, Optional, Tuple

from ..models import AccountBalanceSnapshot, RiskMetrics
from .balance_aggregator import account_balance_usd
from .classifier import is_cross_margin
from .config import RiskEngineConfig
from .entry_price import average_entry_price
from .margin_ratio import MarginRatioCalculator
from .metrics import MetricRegistry, Timer
from .portfolio_aggregator import PositionAggregator
from .risk_rules import RiskScorer, liquidation_buffer

logger = logging.getLogger(__name__)


def coerce_snapshot(account_balance: Any) -> Optional[AccountBalanceSnapshot]:
    """Return a parsed snapshot, or ``None`` when the input is unusable."""

    if isinstance(account_balance, AccountBalanceSnapshot):
        return account_balance
    if not isinstance(account_balance, Mapping):
        return None
    if not isinstance(account_balance.get("assets"), list):
        return None
    return AccountBalanceSnapshot.from_payload(account_balance)


def compute_liquidation_risk(
    account_balance: Any,
    current_prices: Optional[Mapping[str, Any]] = None,
    *,
    config: Optional[RiskEngineConfig] = None,
    margin_ratio: Optional[MarginRatioCalculator] = None,
) -> RiskMetrics:
    """Compute liquidation risk metrics (risk score 0 = liquidation, 100 = safe).

    ``account_balance`` is either an :class:`AccountBalanceSnapshot` or the raw
    ``{"exchange", "assets", "equities"}`` payload. Missing snapshots or
    non-list ``assets`` yield :meth:`RiskMetrics.safe_default` instead of an
    error.
    """

    snapshot = coerce_snapshot(account_balance)
    if snapshot is None:
        logger.debug("Account snapshot missing or malformed; returning safe default")
        return RiskMetrics.safe_default()

    config = config or RiskEngineConfig()
    cross_margin = is_cross_margin(snapshot, config.classifier_stablecoins)
    balance = account_balance_usd(snapshot, cross_margin, config.cash_assets)

    # Margin ratios are computed against the balance before any margin adjustment.
    exposure = PositionAggregator(margin_ratio).aggregate(snapshot, balance, cross_margin, current_prices)
    if cross_margin and config.include_margin_in_cross_balance:
        balance += exposure.maintenance_margin_usd + exposure.initial_margin_usd

    buffer = liquidation_buffer(
        balance, exposure.margin_balance_usd, exposure.maintenance_margin_usd, cross_margin
    )
    score = RiskScorer(config.scoring).score(
        exposure.per_position, buffer, exposure.maintenance_margin_usd, cross_margin
    )
    metrics = RiskMetrics(
        liquidation_buffer=buffer,
        account_balance_usd=balance,
        total_position_notional_usd=exposure.total_position_notional_usd,
        average_leverage=exposure.average_leverage,
        maintenance_margin_usd=exposure.maintenance_margin_usd,
        risk_score=score,
        has_perp_exposure=exposure.has_perp_exposure,
        per_position=tuple(exposure.per_position),
        average_entry_price=average_entry_price(exposure.per_position),
    )
    logger.debug(
        "Computed liquidation risk",
        extra={
            "exchange": snapshot.exchange,
            "cross_margin": cross_margin,
            "account_balance_usd": balance,
            "liquidation_buffer": buffer,
            "risk_score": score,
        },
    )
    return metrics


class RiskEngine:
    """Memoizing front end for :func:`compute_liquidation_risk`.

    Keeps the last result keyed on the identity of both inputs, so callers
    that re-render with unchanged objects skip the recomputation. Passing a
    new snapshot or price map (even with equal contents) recomputes.
    """

    def __init__(
        self,
        config: Optional[RiskEngineConfig] = None,
        *,
        margin_ratio: Optional[MarginRatioCalculator] = None,
        registry: Optional[MetricRegistry] = None,
    ) -> None:
        self._config = config or RiskEngineConfig()
        self._margin_ratio = margin_ratio
        self.registry = registry or MetricRegistry()
        self._lock = threading.Lock()
        # Inputs are held so their ids cannot be reused while cached.
        self._cached_inputs: Optional[Tuple[Any, Any]] = None
        self._cached_result: Optional[RiskMetrics] = None

    @property
    def config(self) -> RiskEngineConfig:
        return self._config

    def evaluate(
        self, account_balance: Any, current_prices: Optional[Mapping[str, Any]] = None
    ) -> RiskMetrics:
        with self._lock:
            cached = self._cached_inputs
            if (
                cached is not None
                and self._cached_result is not None
                and cached[0] is account_balance
                and cached[1] is current_prices
            ):
                self.registry.inc("liquidation_risk.cache", labels={"result": "hit"})
                return self._cached_result
            self.registry.inc("liquidation_risk.cache", labels={"result": "miss"})

        with Timer(self.registry, "liquidation_risk.compute_seconds"):
            result = compute_liquidation_risk(
                account_balance,
                current_prices,
                config=self._config,
                margin_ratio=self._margin_ratio,
            )
        with self._lock:
            self._cached_inputs = (account_balance, current_prices)
            self._cached_result = result
        return result

    def invalidate(self) -> None:
        with self._lock:
            self._cached_inputs = None
            self._cached_result = None
