"""
Indicator Engine Service Implementation

Calculates all technical indicators from a CandleSeries.
Pure Python/NumPy calculations; no state is kept between calls.
"""

import logging
import math
from typing import Optional

from techscan.core.config import ScoringConfig
from techscan.schemas.market import CandleSeries
from techscan.services.indicators.interface import (
    IndicatorReading,
    IndicatorServiceInterface,
    IndicatorSnapshot,
)
from techscan.services.indicators.calculations import (
    ema,
    rsi,
    macd,
    stochastic,
    cci,
    williams_r,
    mfi,
    atr,
    bollinger_bands,
    bollinger_squeeze,
    vwap,
    obv,
    obv_slope,
    obv_trend,
    volume_oscillator,
    average_volume,
    adx,
    parabolic_sar,
    get_last_valid,
)

logger = logging.getLogger(__name__)


def _finite(value: Optional[float]) -> Optional[float]:
    """Drop NaN/inf so they never reach a result."""
    if value is None or not math.isfinite(value):
        return None
    return float(value)


def ema_stack_label(price: Optional[float], fast: Optional[float], slow: Optional[float]) -> str:
    """bullish for price > fast > slow, bearish for price < fast < slow, else neutral."""
    if price is None or fast is None or slow is None:
        return "neutral"
    if price > fast > slow:
        return "bullish"
    if price < fast < slow:
        return "bearish"
    return "neutral"


class IndicatorService(IndicatorServiceInterface):
    """
    Turns a CandleSeries into an IndicatorSnapshot of raw readings.

    The same candles always produce the same snapshot.
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()

    @property
    def name(self) -> str:
        return "IndicatorService"

    async def execute(self, input_data: CandleSeries) -> IndicatorSnapshot:
        """Calculate indicators for one series."""
        return self.calculate(input_data)

    def calculate(self, series: CandleSeries) -> IndicatorSnapshot:
        """Calculate all indicators for a single series."""
        if len(series) == 0:
            logger.debug(f"Empty series for {series.symbol}")
            return IndicatorSnapshot(symbol=series.symbol, price=None)

        p = self.config.periods
        highs, lows = series.highs, series.lows
        closes, volumes = series.closes, series.volumes
        count = len(closes)
        price = float(closes[-1])

        readings: dict[str, IndicatorReading] = {}

        # Trend
        ema_fast = _finite(get_last_valid(ema(closes, p.ema_fast)))
        ema_slow = _finite(get_last_valid(ema(closes, p.ema_slow)))
        if count >= p.ema_slow and ema_fast is not None and ema_slow is not None:
            readings["ema_crossover"] = IndicatorReading(
                value=ema_fast - ema_slow,
                label=ema_stack_label(price, ema_fast, ema_slow),
            )
        else:
            readings["ema_crossover"] = IndicatorReading(value=None)

        vwap_val = _finite(get_last_valid(vwap(highs, lows, closes, volumes)))
        readings["vwap"] = IndicatorReading(
            value=vwap_val,
            rule_input=price - vwap_val if vwap_val is not None else None,
        )

        adx_arr, plus_di_arr, minus_di_arr = adx(highs, lows, closes, p.adx)
        adx_val = _finite(get_last_valid(adx_arr))
        plus_di = _finite(get_last_valid(plus_di_arr))
        minus_di = _finite(get_last_valid(minus_di_arr))
        readings["adx"] = IndicatorReading(value=adx_val)
        if plus_di is not None and minus_di is not None:
            readings["plus_di"] = IndicatorReading(value=plus_di, rule_input=plus_di - minus_di)
        else:
            readings["plus_di"] = IndicatorReading(value=None)

        sar_arr, sar_trend = parabolic_sar(highs, lows, p.psar_step, p.psar_max)
        sar_val = _finite(get_last_valid(sar_arr))
        trend_dir = get_last_valid(sar_trend)
        readings["parabolic_sar"] = IndicatorReading(
            value=sar_val,
            label=None if trend_dir is None else ("bullish" if trend_dir > 0 else "bearish"),
        )

        # Momentum
        rsi_val = _finite(get_last_valid(rsi(closes, p.rsi)))
        readings["rsi"] = IndicatorReading(value=rsi_val)

        macd_val: Optional[float] = None
        if count >= p.macd_slow + p.macd_signal - 1:
            macd_line, _signal_line, histogram = macd(closes, p.macd_fast, p.macd_slow, p.macd_signal)
            macd_val = _finite(get_last_valid(macd_line))
            hist_val = _finite(get_last_valid(histogram))
            readings["macd"] = IndicatorReading(value=macd_val, rule_input=hist_val)
        else:
            readings["macd"] = IndicatorReading(value=None)

        k_arr, _d_arr = stochastic(highs, lows, closes, p.stochastic_k, p.stochastic_d)
        readings["stochastic"] = IndicatorReading(value=_finite(get_last_valid(k_arr)))
        readings["williams_r"] = IndicatorReading(
            value=_finite(get_last_valid(williams_r(highs, lows, closes, p.williams_r)))
        )
        readings["cci"] = IndicatorReading(
            value=_finite(get_last_valid(cci(highs, lows, closes, p.cci)))
        )
        readings["mfi"] = IndicatorReading(
            value=_finite(get_last_valid(mfi(highs, lows, closes, volumes, p.mfi)))
        )

        # Volume
        obv_arr = obv(closes, volumes)
        obv_dir = obv_trend(obv_arr, p.obv_trend_lookback)
        readings["obv"] = IndicatorReading(
            value=_finite(get_last_valid(obv_arr)),
            rule_input=_finite(obv_slope(obv_arr, p.obv_trend_lookback)),
            label=obv_dir,
        )
        readings["volume_oscillator"] = IndicatorReading(
            value=_finite(
                get_last_valid(volume_oscillator(volumes, p.volume_osc_short, p.volume_osc_long))
            )
        )
        avg_vol, prev_avg_vol = average_volume(volumes, p.volume_window)

        # Volatility
        _upper, _middle, _lower, bandwidth = bollinger_bands(closes, p.bollinger, p.bollinger_std)
        squeeze = bollinger_squeeze(bandwidth, self.config.state.bb_squeeze_width)
        readings["bb_squeeze"] = IndicatorReading(
            value=None if squeeze is None else float(squeeze)
        )

        atr_val = _finite(get_last_valid(atr(highs, lows, closes, p.atr)))
        atr_pct = (atr_val / price) * 100 if atr_val is not None and price > 0 else None
        readings["atr"] = IndicatorReading(value=_finite(atr_pct))

        return IndicatorSnapshot(
            symbol=series.symbol,
            price=price,
            readings=readings,
            ema_fast=ema_fast,
            ema_slow=ema_slow,
            vwap=vwap_val,
            rsi=rsi_val,
            macd=macd_val,
            adx=adx_val,
            obv_trend=obv_dir,
            avg_volume=_finite(avg_vol),
            prev_avg_volume=_finite(prev_avg_vol),
            bb_squeeze=squeeze,
            atr_percent=_finite(atr_pct),
        )

    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        return True


def raw_values(snapshot: IndicatorSnapshot) -> dict[str, Optional[float]]:
    """Flat name -> raw value map, as handed to narrative consumers."""
    values = {name: reading.value for name, reading in snapshot.readings.items()}
    values["ema_fast"] = snapshot.ema_fast
    values["ema_slow"] = snapshot.ema_slow
    values["avg_volume"] = snapshot.avg_volume
    values["prev_avg_volume"] = snapshot.prev_avg_volume
    return values


# Singleton instance
_service_instance: Optional[IndicatorService] = None


def get_indicator_service() -> IndicatorService:
    """Get or create indicator service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = IndicatorService()
    return _service_instance
