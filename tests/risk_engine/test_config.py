import pytest

from liquidation_risk.risk_engine.config import (
    CASH_ASSETS,
    CLASSIFIER_STABLECOINS,
    RiskEngineConfig,
    Settings,
)


def test_defaults_match_dashboard_scaling():
    config = RiskEngineConfig()

    assert config.scoring.cross_margin_multiplier == pytest.approx(1.5)
    assert config.scoring.conventional_multiplier == pytest.approx(2.0)
    assert config.scoring.buffer_safety_multiple == pytest.approx(2.0)
    assert config.include_margin_in_cross_balance is False
    assert "usdh" not in CLASSIFIER_STABLECOINS
    assert "USDH" in CASH_ASSETS


def test_settings_from_environment_overrides():
    env = {
        "RISK_CROSS_MARGIN_MULTIPLIER": "3",
        "RISK_CONVENTIONAL_MULTIPLIER": "2.5",
        "RISK_BUFFER_SAFETY_MULTIPLE": "1.5",
        "RISK_INCLUDE_MARGIN_IN_CROSS_BALANCE": "yes",
        "RISK_LOG_LEVEL": "2",
        "RISK_WEB_HOST": "0.0.0.0",
        "RISK_WEB_PORT": "9100",
    }

    settings = Settings.from_environment(env=env)

    assert settings.risk.scoring.cross_margin_multiplier == pytest.approx(3)
    assert settings.risk.scoring.conventional_multiplier == pytest.approx(2.5)
    assert settings.risk.scoring.buffer_safety_multiple == pytest.approx(1.5)
    assert settings.risk.include_margin_in_cross_balance is True
    assert settings.log_level == 2
    assert settings.web_host == "0.0.0.0"
    assert settings.web_port == 9100


def test_invalid_environment_values_are_ignored():
    env = {
        "RISK_CROSS_MARGIN_MULTIPLIER": "fast",
        "RISK_CONVENTIONAL_MULTIPLIER": "-1",
        "RISK_LOG_LEVEL": "verbose",
        "RISK_WEB_PORT": "70000",
    }

    settings = Settings.from_environment(env=env)

    assert settings.risk.scoring.cross_margin_multiplier == pytest.approx(1.5)
    assert settings.risk.scoring.conventional_multiplier == pytest.approx(2.0)
    assert settings.log_level == 1
    assert settings.web_port == 8000


def test_empty_environment_gives_defaults():
    settings = Settings.from_environment(env={})

    assert settings.risk == RiskEngineConfig()
    assert settings.risk.include_margin_in_cross_balance is False
