"""Liquidation risk engine components.

The package is a pure transform from an account snapshot and a price map to
:class:`~liquidation_risk.models.RiskMetrics`, composed of exchange
classification, balance and position aggregation, margin ratio calculation
and risk scoring.
"""

from .classifier import is_cross_margin
from .config import RiskEngineConfig, ScoringConfig, Settings
from .core import RiskEngine, compute_liquidation_risk
from .margin_ratio import MarginRatioCalculator, calculate_margin_ratio
from .metrics import MetricRegistry
from .portfolio_aggregator import PositionAggregator, PositionExposure
from .risk_rules import RiskLevel, RiskScorer

__all__ = [
    "MarginRatioCalculator",
    "MetricRegistry",
    "PositionAggregator",
    "PositionExposure",
    "RiskEngine",
    "RiskEngineConfig",
    "RiskLevel",
    "RiskScorer",
    "ScoringConfig",
    "Settings",
    "calculate_margin_ratio",
    "compute_liquidation_risk",
    "is_cross_margin",
]
