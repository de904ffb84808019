"""
Indicator calculation tests.

Pure numpy functions, checked against hand-computed values and the
documented edge-case clamps.
"""

import math

import numpy as np
import pytest

from techscan.services.indicators.calculations import (
    adx,
    atr,
    average_volume,
    bollinger_bands,
    bollinger_squeeze,
    cci,
    ema,
    get_last_valid,
    macd,
    mfi,
    obv,
    obv_trend,
    parabolic_sar,
    rsi,
    sma,
    stochastic,
    volume_oscillator,
    vwap,
    williams_r,
)


def _fall_then_rise():
    """15 falling bars then 15 rising bars."""
    highs = [100 - i for i in range(15)] + [100 + i for i in range(15)]
    lows = [98 - i for i in range(15)] + [98 + i for i in range(15)]
    closes = [99 - i for i in range(15)] + [99 + i for i in range(15)]
    volumes = [1000.0] * 30
    return (
        np.array(highs, dtype=float),
        np.array(lows, dtype=float),
        np.array(closes, dtype=float),
        np.array(volumes),
    )


class TestMovingAverages:
    def test_sma_short_series_is_nan(self):
        assert np.isnan(sma(np.array([1.0, 2.0]), 3)).all()

    def test_sma_values(self):
        result = sma(np.array([1.0, 2.0, 3.0, 4.0]), 2)
        assert np.isnan(result[0])
        assert result[1:].tolist() == [1.5, 2.5, 3.5]

    def test_ema_seeded_with_first_value(self):
        result = ema(np.array([10.0, 20.0, 30.0]), 3)
        assert result[0] == 10.0
        # multiplier 0.5
        assert result[1] == pytest.approx(15.0)
        assert result[2] == pytest.approx(22.5)

    def test_ema_empty(self):
        assert len(ema(np.array([]), 5)) == 0


class TestMomentum:
    def test_rsi_needs_period_plus_one(self):
        closes = np.arange(1.0, 15.0)  # 14 closes
        assert get_last_valid(rsi(closes, 14)) is None

    def test_rsi_without_losses_is_100(self):
        closes = np.arange(1.0, 31.0)
        assert get_last_valid(rsi(closes, 14)) == 100

    def test_rsi_without_gains_is_0(self):
        closes = np.arange(30.0, 0.0, -1.0)
        assert get_last_valid(rsi(closes, 14)) == pytest.approx(0.0)

    def test_rsi_in_range(self):
        closes = np.array([44, 44.3, 44.1, 44.5, 43.9, 44.6, 45.2, 45.0, 45.8,
                           46.1, 45.6, 46.3, 46.0, 46.4, 46.9, 46.5, 47.0])
        value = get_last_valid(rsi(closes, 14))
        assert 50 < value < 100

    def test_macd_histogram_positive_in_uptrend(self):
        closes = np.linspace(100, 150, 60)
        macd_line, signal_line, histogram = macd(closes)
        assert get_last_valid(macd_line) > 0
        assert get_last_valid(histogram) == pytest.approx(
            get_last_valid(macd_line) - get_last_valid(signal_line)
        )

    def test_stochastic_flat_range_is_50(self):
        flat = np.full(20, 10.0)
        k, _d = stochastic(flat, flat, flat, 14, 3)
        assert get_last_valid(k) == 50

    def test_williams_flat_range_is_minus_50(self):
        flat = np.full(20, 10.0)
        assert get_last_valid(williams_r(flat, flat, flat, 14)) == -50

    def test_cci_zero_deviation_is_0(self):
        flat = np.full(25, 10.0)
        assert get_last_valid(cci(flat, flat, flat, 20)) == 0


class TestMoneyFlow:
    def test_mfi_no_negative_flow_is_exactly_100(self):
        highs, lows, closes, volumes = _fall_then_rise()
        assert get_last_valid(mfi(highs, lows, closes, volumes, 14)) == 100

    def test_mfi_no_positive_flow_is_exactly_0(self):
        highs = np.array([100.0 - i for i in range(30)])
        lows = highs - 2
        closes = highs - 1
        volumes = np.full(30, 1000.0)
        assert get_last_valid(mfi(highs, lows, closes, volumes, 14)) == 0

    def test_mfi_needs_period_plus_one(self):
        highs, lows, closes, volumes = _fall_then_rise()
        assert get_last_valid(mfi(highs[:14], lows[:14], closes[:14], volumes[:14], 14)) is None

    def test_mfi_mixed_flow_between_bounds(self):
        highs, lows, closes, volumes = _fall_then_rise()
        # window straddles the turn
        value = get_last_valid(mfi(highs[:22], lows[:22], closes[:22], volumes[:22], 14))
        assert 0 < value < 100


class TestVolume:
    def test_obv_starts_at_zero(self):
        closes = np.array([10.0, 11.0, 10.0, 10.0])
        volumes = np.array([100.0, 200.0, 300.0, 400.0])
        assert obv(closes, volumes).tolist() == [0.0, 200.0, -100.0, -100.0]

    def test_obv_trend(self):
        rising = obv(np.arange(1.0, 11.0), np.full(10, 5.0))
        falling = obv(np.arange(10.0, 0.0, -1.0), np.full(10, 5.0))
        flat = obv(np.full(10, 3.0), np.full(10, 5.0))
        assert obv_trend(rising) == "up"
        assert obv_trend(falling) == "down"
        assert obv_trend(flat) is None

    def test_obv_trend_needs_three_points(self):
        assert obv_trend(np.array([0.0, 10.0])) is None

    def test_vwap_zero_volume_falls_back_to_typical_price(self):
        highs = np.array([12.0, 13.0])
        lows = np.array([8.0, 9.0])
        closes = np.array([10.0, 11.0])
        result = vwap(highs, lows, closes, np.zeros(2))
        assert result.tolist() == [10.0, 11.0]

    def test_volume_oscillator_flat_is_zero(self):
        assert get_last_valid(volume_oscillator(np.full(12, 50.0), 5, 10)) == 0

    def test_average_volume_windows(self):
        volumes = np.array([1.0] * 20 + [3.0] * 20)
        current, previous = average_volume(volumes, 20)
        assert current == 3.0
        assert previous == 1.0

    def test_average_volume_short_history(self):
        current, previous = average_volume(np.full(25, 2.0), 20)
        assert current == 2.0
        assert previous is None


class TestVolatility:
    def test_atr_needs_period_plus_one(self):
        flat = np.full(14, 10.0)
        assert get_last_valid(atr(flat, flat, flat, 14)) is None

    def test_atr_constant_range(self):
        closes = np.full(30, 10.0)
        highs = closes + 1
        lows = closes - 1
        assert get_last_valid(atr(highs, lows, closes, 14)) == pytest.approx(2.0)

    def test_bollinger_flat_prices_squeeze(self):
        closes = np.full(25, 100.0)
        _upper, middle, _lower, bandwidth = bollinger_bands(closes, 20, 2.0)
        assert get_last_valid(middle) == 100.0
        assert get_last_valid(bandwidth) == 0.0
        assert bollinger_squeeze(bandwidth, 0.1) == 1

    def test_bollinger_wide_bands_no_squeeze(self):
        closes = np.array([100.0, 140.0] * 15)
        _upper, _middle, _lower, bandwidth = bollinger_bands(closes, 20, 2.0)
        assert bollinger_squeeze(bandwidth, 0.1) == 0

    def test_bollinger_short_series_undefined(self):
        _upper, _middle, _lower, bandwidth = bollinger_bands(np.full(10, 1.0), 20, 2.0)
        assert bollinger_squeeze(bandwidth, 0.1) is None


class TestTrend:
    def _trend(self, count):
        closes = np.linspace(100, 100 + count, count)
        return closes + 1, closes - 1, closes

    def test_adx_needs_two_periods(self):
        highs, lows, closes = self._trend(27)
        adx_arr, _plus, _minus = adx(highs, lows, closes, 14)
        assert get_last_valid(adx_arr) is None

        highs, lows, closes = self._trend(28)
        adx_arr, _plus, _minus = adx(highs, lows, closes, 14)
        assert get_last_valid(adx_arr) is not None

    def test_adx_strong_uptrend(self):
        highs, lows, closes = self._trend(60)
        adx_arr, plus_di, minus_di = adx(highs, lows, closes, 14)
        assert get_last_valid(adx_arr) > 25
        assert get_last_valid(plus_di) > get_last_valid(minus_di)

    def test_parabolic_sar_follows_uptrend(self):
        highs, lows, _closes = self._trend(40)
        sar, trend = parabolic_sar(highs, lows)
        assert get_last_valid(trend) == 1
        assert get_last_valid(sar) < lows[-1]

    def test_parabolic_sar_single_candle(self):
        sar, trend = parabolic_sar(np.array([2.0]), np.array([1.0]))
        assert get_last_valid(sar) is None
        assert get_last_valid(trend) is None


class TestGetLastValid:
    def test_skips_trailing_nan(self):
        assert get_last_valid(np.array([1.0, 2.0, np.nan])) == 2.0

    def test_skips_inf(self):
        assert get_last_valid(np.array([1.0, math.inf])) == 1.0

    def test_all_nan(self):
        assert get_last_valid(np.array([np.nan, np.nan])) is None
