"""Settings and ScoringConfig tests."""

import json
import logging

import pytest
from pydantic import ValidationError

from techscan.core.config import (
    IndicatorPeriods,
    NormalizationRule,
    RuleKind,
    ScoringConfig,
    Settings,
    StateThresholds,
)
from techscan.core.logging_config import configure_logging
from techscan.services.base import ConfigurationError


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.default_timeframe == "1d"
        assert settings.candle_lookback == 200

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("TECHSCAN_CANDLE_LOOKBACK", "300")
        monkeypatch.setenv("TECHSCAN_SCAN_CONCURRENCY", "3")
        settings = Settings()
        assert settings.candle_lookback == 300
        assert settings.scan_concurrency == 3

    def test_rejects_zero_concurrency(self):
        with pytest.raises(ValidationError):
            Settings(scan_concurrency=0)


class TestScoringConfig:
    def test_defaults(self):
        config = ScoringConfig()
        assert config.version == "1.0"
        assert config.score_bound == 3.0
        assert set(config.composite_weights) == {"ema_crossover", "rsi", "macd", "obv", "bb_squeeze"}
        assert len(config.rules) == 15

    def test_frozen(self):
        config = ScoringConfig()
        with pytest.raises(ValidationError):
            config.version = "2.0"

    def test_weights_must_reference_rules(self):
        with pytest.raises(ValidationError):
            ScoringConfig(composite_weights={"unknown": 1.0})

    def test_cannot_disable_unknown(self):
        with pytest.raises(ValidationError):
            ScoringConfig(disabled_indicators=["unknown"])

    def test_is_enabled(self):
        config = ScoringConfig(disabled_indicators=["cci"])
        assert config.is_enabled("rsi")
        assert not config.is_enabled("cci")
        assert not config.is_enabled("unknown")

    def test_band_rule_needs_bounds(self):
        with pytest.raises(ValidationError):
            NormalizationRule(kind=RuleKind.BAND, display_name="X", tier=1, lower=10)

    def test_period_pairs(self):
        with pytest.raises(ValidationError):
            IndicatorPeriods(ema_fast=50, ema_slow=20)

    def test_state_threshold_order(self):
        with pytest.raises(ValidationError):
            StateThresholds(rsi_oversold=60)

    def test_from_file(self, tmp_path):
        path = tmp_path / "scoring.json"
        path.write_text(
            json.dumps(
                {
                    "version": "2.0",
                    "recommendation": {"strong_sell": -4, "sell": -1, "buy": 1, "strong_buy": 4},
                    "disabled_indicators": ["williams_r"],
                }
            )
        )
        config = ScoringConfig.from_file(str(path))
        assert config.version == "2.0"
        assert config.recommendation.buy == 1
        assert not config.is_enabled("williams_r")
        # untouched sections keep defaults
        assert config.periods.rsi == 14

    def test_from_file_invalid(self, tmp_path):
        path = tmp_path / "scoring.json"
        path.write_text(json.dumps({"recommendation": {"buy": -3}}))
        with pytest.raises(ConfigurationError):
            ScoringConfig.from_file(str(path))

    def test_from_file_missing(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ScoringConfig.from_file(str(tmp_path / "missing.json"))


def test_configure_logging():
    configure_logging("debug")
    assert logging.getLogger("techscan").level == logging.DEBUG
    configure_logging("not-a-level")
    assert logging.getLogger("techscan").level == logging.INFO
