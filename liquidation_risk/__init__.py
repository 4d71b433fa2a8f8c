"""Liquidation risk analytics for trading accounts."""

from .models import AccountBalanceSnapshot, PerPositionMetrics, RiskMetrics
from .risk_engine import RiskEngine, compute_liquidation_risk

__all__ = [
    "AccountBalanceSnapshot",
    "PerPositionMetrics",
    "RiskEngine",
    "RiskMetrics",
    "compute_liquidation_risk",
]
