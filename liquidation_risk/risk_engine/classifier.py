"""Detect Hyperliquid-style cross margin accounts."""

from __future__ import annotations

from typing import AbstractSet

from ..models import AccountBalanceSnapshot
from .coercion import coerce_float
from .config import CLASSIFIER_STABLECOINS

CROSS_MARGIN_EXCHANGES = frozenset({"hyperliquid"})


def is_cross_margin(
    snapshot: AccountBalanceSnapshot,
    stablecoins: AbstractSet[str] = CLASSIFIER_STABLECOINS,
) -> bool:
    """Return ``True`` when the account shares one margin pool across positions.

    Besides an explicit ``hyperliquid`` exchange, holding any non-stablecoin
    token with a positive notional is taken as the signature of such an
    account, since conventional derivative wallets only carry quote coins.
    """

    if snapshot.exchange.lower() in CROSS_MARGIN_EXCHANGES:
        return True
    for token in snapshot.tokens():
        if not token.symbol or token.symbol.lower() in stablecoins:
            continue
        if coerce_float(token.notional) > 0:
            return True
    return False
