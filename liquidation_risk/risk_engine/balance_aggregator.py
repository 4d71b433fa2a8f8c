"""Account balance in USD from equity records or token holdings."""

from __future__ import annotations

import logging
from typing import AbstractSet

from ..models import AccountBalanceSnapshot
from .coercion import coerce_float
from .config import CASH_ASSETS

logger = logging.getLogger(__name__)


def is_cash_asset(symbol: str, cash_assets: AbstractSet[str] = CASH_ASSETS) -> bool:
    return bool(symbol) and symbol.upper() in cash_assets


def account_balance_usd(
    snapshot: AccountBalanceSnapshot,
    is_cross_margin: bool,
    cash_assets: AbstractSet[str] = CASH_ASSETS,
) -> float:
    """Return the account balance used as the equity baseline.

    Explicit per-wallet equities win. Otherwise the balance is rebuilt from
    token notionals plus the unrealized PnL of open positions; conventional
    accounts count cash assets only, while cross margin accounts count every
    token since their notionals are already USD values.
    """

    if snapshot.equities:
        return sum(coerce_float(entry.total_equity) for entry in snapshot.equities)

    token_balance = sum(
        coerce_float(token.notional)
        for token in snapshot.tokens()
        if is_cross_margin or is_cash_asset(token.symbol, cash_assets)
    )
    position_pnl = sum(coerce_float(position.unrealized_profit) for position in snapshot.positions())
    logger.debug(
        "Derived account balance from assets",
        extra={"token_balance": token_balance, "position_pnl": position_pnl},
    )
    return token_balance + position_pnl
