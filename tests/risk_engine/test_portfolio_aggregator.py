import pytest

from liquidation_risk.models import AccountBalanceSnapshot
from liquidation_risk.risk_engine.portfolio_aggregator import PositionAggregator, PositionExposure


def make_snapshot(assets, exchange="binance"):
    return AccountBalanceSnapshot.from_payload({"exchange": exchange, "assets": assets})


def test_aggregate_accumulates_margin_and_exposure():
    snapshot = make_snapshot(
        [
            {"asset_type": "token", "symbol": "USDT", "notional": 1000, "margin_balance": 1200},
            {
                "asset_type": "position",
                "symbol": "BTC",
                "notional": 1000,
                "leverage": 10,
                "maint_margin": 10,
                "initial_margin": 100,
                "margin_balance": 200,
                "size": 0.02,
            },
            {
                "asset_type": "position",
                "symbol": "ETH",
                "notional": -3000,
                "leverage": "5",
                "maint_margin": 30,
                "initial_margin": 600,
                "margin_balance": 20,
                "size": -1,
            },
            {"asset_type": "vault", "symbol": "HLP", "notional": 100000, "margin_balance": 5000},
        ]
    )

    exposure = PositionAggregator().aggregate(snapshot, 1000, False, {"BTC": 51000})

    assert isinstance(exposure, PositionExposure)
    assert exposure.has_perp_exposure is True
    assert exposure.margin_balance_usd == pytest.approx(1200)
    assert exposure.signed_notional_usd == pytest.approx(-2000)
    assert exposure.total_position_notional_usd == pytest.approx(2000)
    assert exposure.maintenance_margin_usd == pytest.approx(40)
    assert exposure.initial_margin_usd == pytest.approx(700)
    assert exposure.average_leverage == pytest.approx(6.25)

    btc, eth = exposure.per_position
    assert btc.symbol == "BTC"
    assert btc.current_price == pytest.approx(51000)
    assert btc.buffer == pytest.approx(190)
    assert btc.margin_ratio_pct == pytest.approx(5)
    assert eth.notional == pytest.approx(3000)
    assert eth.current_price == 0
    assert eth.buffer == 0
    assert eth.size == pytest.approx(-1)
    assert eth.avg_entry_price == pytest.approx(3000)


def test_positions_without_leverage_are_excluded_from_weighting():
    snapshot = make_snapshot(
        [
            {"asset_type": "position", "symbol": "BTC", "notional": 1000, "leverage": 10},
            {"asset_type": "position", "symbol": "ETH", "notional": 3000},
        ]
    )

    exposure = PositionAggregator().aggregate(snapshot, 0, False)

    assert exposure.average_leverage == pytest.approx(10)
    assert exposure.per_position[1].leverage == 0


def test_margin_ratio_receives_pre_pass_balance():
    calls = []

    def recorder(position, balance, cross):
        calls.append((position.symbol, balance, cross))
        return 12.0

    snapshot = make_snapshot(
        [
            {"asset_type": "position", "symbol": "BTC", "notional": 1000, "maint_margin": 10},
            {"asset_type": "position", "symbol": "ETH", "notional": 500, "maint_margin": 5},
        ],
        exchange="hyperliquid",
    )

    exposure = PositionAggregator(recorder).aggregate(snapshot, 777.0, True)

    assert calls == [("BTC", 777.0, True), ("ETH", 777.0, True)]
    assert [p.margin_ratio_pct for p in exposure.per_position] == [12.0, 12.0]


def test_tokens_only_have_no_perp_exposure():
    snapshot = make_snapshot([{"asset_type": "token", "symbol": "USDT", "notional": 10}])

    exposure = PositionAggregator().aggregate(snapshot, 10, False)

    assert exposure.has_perp_exposure is False
    assert exposure.per_position == []
    assert exposure.average_leverage == 0


def test_exposure_keeps_signed_and_absolute_notional():
    snapshot = make_snapshot([{"asset_type": "position", "symbol": "ETH", "notional": -300}])

    exposure = PositionAggregator().aggregate(snapshot, 0, False)

    assert exposure.signed_notional_usd == pytest.approx(-300)
    assert exposure.total_position_notional_usd == pytest.approx(300)
    assert exposure.per_position[0].notional == pytest.approx(300)
