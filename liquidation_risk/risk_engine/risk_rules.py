"""Pure scoring logic turning aggregated margin data into a 0-100 safety score."""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Optional, Sequence

from ..models import PerPositionMetrics
from .config import ScoringConfig

logger = logging.getLogger(__name__)

AT_RISK_THRESHOLD = 50


class RiskLevel(str, Enum):
    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"


class RiskScoreBand(str, Enum):
    NEUTRAL = "neutral"
    VERY_SAFE = "very_safe"
    SAFE = "safe"
    MODERATE = "moderate"
    RISKY = "risky"
    VERY_RISKY = "very_risky"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    return max(lower, min(upper, value))


def liquidation_buffer(
    account_balance_usd: float,
    margin_balance_usd: float,
    maintenance_margin_usd: float,
    is_cross_margin: bool,
) -> float:
    """Funds available above the maintenance margin requirement.

    Cross margin accounts measure against the whole account balance; other
    accounts prefer the wallet margin balance when one is reported.
    """

    if is_cross_margin:
        equity_baseline = account_balance_usd
    else:
        equity_baseline = margin_balance_usd if margin_balance_usd > 0 else account_balance_usd
    return max(0.0, equity_baseline - maintenance_margin_usd)


def risk_level(risk_score: float) -> RiskLevel:
    if risk_score > 66:
        return RiskLevel.SAFE
    if risk_score > 33:
        return RiskLevel.WARNING
    return RiskLevel.DANGER


def risk_score_band(risk_score: Optional[float]) -> RiskScoreBand:
    if risk_score is None:
        return RiskScoreBand.NEUTRAL
    if risk_score >= 80:
        return RiskScoreBand.VERY_SAFE
    if risk_score >= 60:
        return RiskScoreBand.SAFE
    if risk_score >= 40:
        return RiskScoreBand.MODERATE
    if risk_score >= 20:
        return RiskScoreBand.RISKY
    return RiskScoreBand.VERY_RISKY


def is_at_risk(risk_score: Optional[float]) -> bool:
    return risk_score is not None and risk_score < AT_RISK_THRESHOLD


class RiskScorer:
    """Score accounts from weighted margin ratios or, without positions, the buffer."""

    def __init__(self, config: Optional[ScoringConfig] = None) -> None:
        self._config = config or ScoringConfig()

    def multiplier(self, is_cross_margin: bool) -> float:
        if is_cross_margin:
            return self._config.cross_margin_multiplier
        return self._config.conventional_multiplier

    def score(
        self,
        per_position: Sequence[PerPositionMetrics],
        liquidation_buffer_usd: float,
        maintenance_margin_usd: float,
        is_cross_margin: bool,
    ) -> int:
        if per_position:
            total_abs = sum(position.notional for position in per_position) or 1.0
            weighted_ratio = sum(
                position.margin_ratio_pct * position.notional / total_abs for position in per_position
            )
            safety = clamp(100 - weighted_ratio * self.multiplier(is_cross_margin))
            score = round_half_up(safety)
        else:
            if maintenance_margin_usd > 0:
                denom = maintenance_margin_usd * self._config.buffer_safety_multiple
            else:
                denom = 1.0
            # Clamp first; floor() rejects infinite ratios.
            score = round_half_up(clamp(liquidation_buffer_usd / denom * 100))

        level = risk_level(score)
        log_level = logging.DEBUG
        if is_at_risk(score) and per_position:
            log_level = logging.WARNING
        logger.log(
            log_level,
            "Scored liquidation risk",
            extra={
                "risk_score": score,
                "risk_level": level.value,
                "positions": len(per_position),
                "cross_margin": is_cross_margin,
            },
        )
        return score
