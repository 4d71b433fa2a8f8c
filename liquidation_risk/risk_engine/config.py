"""Configuration schema for the liquidation risk engine."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import FrozenSet, Mapping, Optional

# Symbols that never mark an account as cross margin when held as tokens.
CLASSIFIER_STABLECOINS: FrozenSet[str] = frozenset(
    {"usdt", "usdc", "usde", "dai", "fdusd", "usdd", "tusd", "busd", "usdk", "pyusd", "usd"}
)

# Cash assets counted towards the balance of conventional accounts. Stored
# upper-case and matched on the upper-cased symbol; the classifier set above is
# lower-case and matched on the lower-cased symbol. USDH counts as cash but does
# not keep an account out of cross margin.
CASH_ASSETS: FrozenSet[str] = frozenset(
    {"USDT", "USDC", "USDE", "DAI", "FDUSD", "USDD", "TUSD", "BUSD", "USDK", "PYUSD", "USD", "USDH"}
)


@dataclass
class ScoringConfig:
    """Multipliers applied when converting margin ratios into a safety score.

    A weighted margin ratio of ``100 / multiplier`` maps to a score of zero, so
    the defaults reach zero at roughly 66.7% for cross margin and 50% otherwise.
    """

    cross_margin_multiplier: float = 1.5
    conventional_multiplier: float = 2.0
    # Buffer of this many times the maintenance margin counts as fully safe.
    buffer_safety_multiple: float = 2.0


@dataclass
class RiskEngineConfig:
    """Unified configuration for classification, aggregation and scoring."""

    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    classifier_stablecoins: FrozenSet[str] = CLASSIFIER_STABLECOINS
    cash_assets: FrozenSet[str] = CASH_ASSETS
    # Off by default: the dashboard never applied the cross margin adjustment.
    include_margin_in_cross_balance: bool = False


@dataclass
class Settings:
    """Single entry point for engine configuration with environment overrides."""

    risk: RiskEngineConfig = field(default_factory=RiskEngineConfig)
    log_level: int = 1
    web_host: str = "127.0.0.1"
    web_port: int = 8000

    @classmethod
    def from_environment(cls, *, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        base = RiskEngineConfig()

        cross = _env_float(env.get("RISK_CROSS_MARGIN_MULTIPLIER"))
        conventional = _env_float(env.get("RISK_CONVENTIONAL_MULTIPLIER"))
        buffer_multiple = _env_float(env.get("RISK_BUFFER_SAFETY_MULTIPLE"))
        if cross is not None and cross > 0:
            base.scoring.cross_margin_multiplier = cross
        if conventional is not None and conventional > 0:
            base.scoring.conventional_multiplier = conventional
        if buffer_multiple is not None and buffer_multiple > 0:
            base.scoring.buffer_safety_multiple = buffer_multiple

        include_margin = _env_bool(env.get("RISK_INCLUDE_MARGIN_IN_CROSS_BALANCE"))
        if include_margin is not None:
            base.include_margin_in_cross_balance = include_margin

        settings = cls(risk=base)
        log_level = _env_int(env.get("RISK_LOG_LEVEL"))
        if log_level is not None:
            settings.log_level = log_level
        host = env.get("RISK_WEB_HOST")
        if host:
            settings.web_host = host
        port = _env_int(env.get("RISK_WEB_PORT"))
        if port is not None and 0 < port < 65536:
            settings.web_port = port
        return settings


def _env_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _env_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _env_bool(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    return str(value).strip().lower() in {"1", "true", "yes", "on"}
