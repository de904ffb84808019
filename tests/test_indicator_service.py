"""IndicatorService tests: readings built from a CandleSeries."""

import pytest

from techscan.schemas.market import CandleSeries, Timeframe
from techscan.services.indicators.interface import IndicatorReading
from techscan.services.indicators.service import (
    IndicatorService,
    ema_stack_label,
    get_indicator_service,
    raw_values,
)
from tests.conftest import make_series, trending_closes

ALL_INDICATORS = {
    "vwap", "rsi", "macd", "ema_crossover", "bb_squeeze", "adx", "plus_di",
    "stochastic", "williams_r", "cci", "mfi", "obv", "atr", "parabolic_sar",
    "volume_oscillator",
}


class TestIndicatorService:
    def test_every_indicator_has_a_reading(self, config, uptrend_series):
        snapshot = IndicatorService(config).calculate(uptrend_series)
        assert set(snapshot.readings) == ALL_INDICATORS
        assert all(r.value is not None for r in snapshot.readings.values())

    def test_uptrend_readings(self, config, uptrend_series):
        snapshot = IndicatorService(config).calculate(uptrend_series)
        assert snapshot.readings["ema_crossover"].label == "bullish"
        assert snapshot.ema_fast > snapshot.ema_slow
        assert snapshot.obv_trend == "up"
        assert snapshot.readings["parabolic_sar"].label == "bullish"
        assert snapshot.price == uptrend_series.price

    def test_downtrend_readings(self, config, downtrend_series):
        snapshot = IndicatorService(config).calculate(downtrend_series)
        assert snapshot.readings["ema_crossover"].label == "bearish"
        assert snapshot.macd < 0

    def test_short_series_reads_none(self, config):
        series = make_series("NEWUSDT", trending_closes(10))
        snapshot = IndicatorService(config).calculate(series)
        for name in ("ema_crossover", "macd", "adx", "rsi", "mfi", "bb_squeeze"):
            assert snapshot.readings[name].value is None, name
        # defined from the first candle
        assert snapshot.readings["vwap"].value is not None

    def test_empty_series(self, config):
        series = CandleSeries(symbol="EMPTYUSDT", timeframe=Timeframe.H1)
        snapshot = IndicatorService(config).calculate(series)
        assert snapshot.price is None
        assert snapshot.readings == {}

    def test_flat_series_squeezes(self, config, flat_series):
        snapshot = IndicatorService(config).calculate(flat_series)
        assert snapshot.bb_squeeze == 1
        assert snapshot.readings["bb_squeeze"].value == 1.0

    def test_atr_is_percent_of_price(self, config, uptrend_series):
        snapshot = IndicatorService(config).calculate(uptrend_series)
        assert 0 < snapshot.atr_percent < 10
        assert snapshot.readings["atr"].value == snapshot.atr_percent

    def test_raw_values(self, config, uptrend_series):
        snapshot = IndicatorService(config).calculate(uptrend_series)
        values = raw_values(snapshot)
        assert ALL_INDICATORS <= set(values)
        assert values["ema_fast"] == snapshot.ema_fast
        assert "prev_avg_volume" in values

    @pytest.mark.asyncio
    async def test_execute_matches_calculate(self, config, uptrend_series):
        service = IndicatorService(config)
        assert await service.execute(uptrend_series) == service.calculate(uptrend_series)
        assert await service.health_check() is True

    def test_singleton(self):
        assert get_indicator_service() is get_indicator_service()


class TestReadingBasis:
    def test_basis_prefers_rule_input(self):
        assert IndicatorReading(value=1.5, rule_input=-0.2).basis == -0.2
        assert IndicatorReading(value=1.5).basis == 1.5

    def test_ema_stack_label(self):
        assert ema_stack_label(110, 105, 100) == "bullish"
        assert ema_stack_label(90, 95, 100) == "bearish"
        assert ema_stack_label(110, 95, 100) == "neutral"
        assert ema_stack_label(None, 95, 100) == "neutral"
