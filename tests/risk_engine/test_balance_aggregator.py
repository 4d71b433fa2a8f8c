import pytest

from liquidation_risk.models import AccountBalanceSnapshot
from liquidation_risk.risk_engine.balance_aggregator import account_balance_usd, is_cash_asset


def test_equities_take_precedence_over_assets():
    snapshot = AccountBalanceSnapshot.from_payload(
        {
            "exchange": "binance",
            "assets": [{"asset_type": "token", "symbol": "USDT", "notional": 99999}],
            "equities": [{"total_equity": "1000"}, {"total_equity": None}, {"total_equity": 250.5}],
        }
    )

    assert account_balance_usd(snapshot, is_cross_margin=False) == pytest.approx(1250.5)


def test_conventional_balance_counts_cash_assets_and_pnl():
    snapshot = AccountBalanceSnapshot.from_payload(
        {
            "exchange": "binance",
            "assets": [
                {"asset_type": "token", "symbol": "USDT", "notional": 1000},
                {"asset_type": "token", "symbol": "btc", "notional": 5000},
                {"asset_type": "position", "symbol": "BTC", "unrealized_profit": 75},
                {"asset_type": "position", "symbol": "ETH", "unrealized_profit": "-25"},
                {"asset_type": "option", "symbol": "BTC-C", "unrealized_profit": 1000},
            ],
        }
    )

    assert account_balance_usd(snapshot, is_cross_margin=False) == pytest.approx(1050)


def test_cross_margin_balance_counts_every_token():
    snapshot = AccountBalanceSnapshot.from_payload(
        {
            "exchange": "hyperliquid",
            "assets": [
                {"asset_type": "token", "symbol": "USDC", "notional": 1000},
                {"asset_type": "token", "symbol": "HYPE", "notional": 5000},
                {"asset_type": "position", "symbol": "BTC", "unrealized_profit": 50},
            ],
            "equities": [],
        }
    )

    assert account_balance_usd(snapshot, is_cross_margin=True) == pytest.approx(6050)


def test_cash_asset_matching_is_case_insensitive():
    assert is_cash_asset("usdc")
    assert is_cash_asset("USDH")
    assert not is_cash_asset("ETH")
    assert not is_cash_asset("")
