"""Account snapshot inputs and risk metric outputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union


class AssetType(str, Enum):
    TOKEN = "token"
    POSITION = "position"


class MarginMode(str, Enum):
    CROSS = "CROSS"
    ISOLATED = "ISOLATED"
    SPOT_ISOLATED = "SPOT_ISOLATED"


@dataclass(frozen=True)
class TokenAsset:
    """Spot/wallet token holding. Numeric fields stay raw until read."""

    symbol: str = ""
    notional: Any = None
    margin_balance: Any = None
    asset_type: str = field(default=AssetType.TOKEN.value, init=False)


@dataclass(frozen=True)
class PositionAsset:
    """Open derivative position as reported by the exchange."""

    symbol: str = ""
    notional: Any = None
    leverage: Any = None
    maint_margin: Any = None
    initial_margin: Any = None
    margin_balance: Any = None
    unrealized_profit: Any = None
    size: Any = None
    amount: Any = None
    margin_mode: Optional[str] = None
    asset_type: str = field(default=AssetType.POSITION.value, init=False)


@dataclass(frozen=True)
class UnknownAsset:
    """Record with an unrecognised ``asset_type``; ignored by every aggregation."""

    asset_type: Any = None
    symbol: str = ""


AssetRecord = Union[TokenAsset, PositionAsset, UnknownAsset]


@dataclass(frozen=True)
class EquityRecord:
    total_equity: Any = None


def _symbol(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def parse_asset(payload: Any) -> AssetRecord:
    """Build the tagged asset record for a raw mapping."""

    if not isinstance(payload, Mapping):
        return UnknownAsset()
    asset_type = payload.get("asset_type")
    symbol = _symbol(payload.get("symbol"))
    if asset_type == AssetType.TOKEN.value:
        return TokenAsset(
            symbol=symbol,
            notional=payload.get("notional"),
            margin_balance=payload.get("margin_balance"),
        )
    if asset_type == AssetType.POSITION.value:
        margin_mode = payload.get("margin_mode")
        return PositionAsset(
            symbol=symbol,
            notional=payload.get("notional"),
            leverage=payload.get("leverage"),
            maint_margin=payload.get("maint_margin"),
            initial_margin=payload.get("initial_margin"),
            margin_balance=payload.get("margin_balance"),
            unrealized_profit=payload.get("unrealized_profit"),
            size=payload.get("size"),
            amount=payload.get("amount"),
            margin_mode=str(margin_mode) if margin_mode not in (None, "") else None,
        )
    return UnknownAsset(asset_type=asset_type, symbol=symbol)


@dataclass(frozen=True)
class AccountBalanceSnapshot:
    """Immutable view of one account's balances, holdings and positions."""

    exchange: str = ""
    assets: Tuple[AssetRecord, ...] = ()
    equities: Tuple[EquityRecord, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "AccountBalanceSnapshot":
        """Parse the account data provider's payload.

        ``assets`` must already have been validated as a list by the caller;
        ``equities`` that is not a list is treated as empty.
        """

        assets = payload.get("assets") or []
        equities = payload.get("equities")
        if not isinstance(equities, (list, tuple)):
            equities = []
        return cls(
            exchange=_symbol(payload.get("exchange")),
            assets=tuple(parse_asset(asset) for asset in assets),
            equities=tuple(
                EquityRecord(total_equity=entry.get("total_equity") if isinstance(entry, Mapping) else None)
                for entry in equities
            ),
        )

    def tokens(self) -> List[TokenAsset]:
        return [asset for asset in self.assets if isinstance(asset, TokenAsset)]

    def positions(self) -> List[PositionAsset]:
        return [asset for asset in self.assets if isinstance(asset, PositionAsset)]


@dataclass(frozen=True)
class PerPositionMetrics:
    symbol: str
    notional: float
    leverage: float
    maint_margin: float
    margin_balance: float
    buffer: float
    margin_ratio_pct: float
    avg_entry_price: float
    current_price: float
    size: float

    def to_payload(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "notional": self.notional,
            "leverage": self.leverage,
            "maintMargin": self.maint_margin,
            "marginBalance": self.margin_balance,
            "buffer": self.buffer,
            "marginRatioPct": self.margin_ratio_pct,
            "avgEntryPrice": self.avg_entry_price,
            "currentPrice": self.current_price,
            "size": self.size,
        }


@dataclass(frozen=True)
class RiskMetrics:
    """Liquidation risk summary for one account (risk score 100 is safest)."""

    liquidation_buffer: float = 0.0
    account_balance_usd: float = 0.0
    total_position_notional_usd: float = 0.0
    average_leverage: float = 0.0
    maintenance_margin_usd: float = 0.0
    risk_score: int = 100
    has_perp_exposure: bool = False
    per_position: Tuple[PerPositionMetrics, ...] = ()
    average_entry_price: float = 0.0

    @classmethod
    def safe_default(cls) -> "RiskMetrics":
        """Result for missing or malformed snapshots."""

        return cls()

    def to_payload(self) -> Dict[str, Any]:
        return {
            "liquidationBuffer": self.liquidation_buffer,
            "accountBalanceUsd": self.account_balance_usd,
            "totalPositionNotionalUsd": self.total_position_notional_usd,
            "averageLeverage": self.average_leverage,
            "maintenanceMarginUsd": self.maintenance_margin_usd,
            "riskScore": self.risk_score,
            "hasPerpExposure": self.has_perp_exposure,
            "perPosition": [position.to_payload() for position in self.per_position],
            "averageEntryPrice": self.average_entry_price,
        }


__all__: Sequence[str] = [
    "AccountBalanceSnapshot",
    "AssetRecord",
    "AssetType",
    "EquityRecord",
    "MarginMode",
    "PerPositionMetrics",
    "PositionAsset",
    "RiskMetrics",
    "TokenAsset",
    "UnknownAsset",
    "parse_asset",
]
