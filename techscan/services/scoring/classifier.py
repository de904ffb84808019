"""
Market State Classifier

Reduces indicator readings to four coarse states with small decision
tables. Precedence inside each table is fixed:

- trend_bias: a contradictory EMA stack forces neutral, even against VWAP
- momentum_state: RSI extremes win over MACD
- volume_context: OBV trend wins over average-volume comparison
- volatility_state: Bollinger squeeze wins over ATR%
"""

from typing import Optional

from techscan.core.config import ScoringConfig, StateThresholds
from techscan.schemas.indicators import (
    MarketState,
    MomentumState,
    TechnicalSummary,
    TrendBias,
    VolatilityState,
    VolumeContext,
)
from techscan.services.indicators.interface import IndicatorSnapshot
from techscan.services.indicators.service import raw_values


def trend_bias(
    price: Optional[float],
    ema20: Optional[float],
    ema50: Optional[float],
    vwap: Optional[float],
) -> TrendBias:
    if price is None or ema20 is None or ema50 is None:
        return TrendBias.NEUTRAL

    bias = TrendBias.NEUTRAL

    # EMA structure
    if price < ema20 < ema50:
        bias = TrendBias.BEARISH
    elif price > ema20 > ema50:
        bias = TrendBias.BULLISH

    # VWAP pulls toward its side unless the stack already says otherwise
    if vwap is not None:
        if price < vwap and bias != TrendBias.BULLISH:
            bias = TrendBias.BEARISH
        if price > vwap and bias != TrendBias.BEARISH:
            bias = TrendBias.BULLISH

    # Contradictory stack
    if (price > ema20 and ema20 < ema50) or (price < ema20 and ema20 > ema50):
        bias = TrendBias.NEUTRAL

    return bias


def momentum_state(
    rsi: Optional[float],
    macd: Optional[float],
    thresholds: Optional[StateThresholds] = None,
) -> MomentumState:
    t = thresholds or StateThresholds()
    macd_val = macd if macd is not None else 0.0

    if rsi is not None:
        if rsi < t.rsi_oversold:
            return MomentumState.OVERSOLD
        if rsi > t.rsi_overbought:
            return MomentumState.OVERBOUGHT
        if rsi > t.rsi_strong and macd_val > 0:
            return MomentumState.STRONG
        if rsi < t.rsi_weak and macd_val < 0:
            return MomentumState.WEAK

    if macd_val > 0:
        return MomentumState.STRONG
    if macd_val < 0:
        return MomentumState.WEAK

    return MomentumState.NEUTRAL


def volume_context(
    obv_trend: Optional[str],
    avg_volume: Optional[float],
    prev_avg_volume: Optional[float],
) -> VolumeContext:
    if obv_trend == "up":
        return VolumeContext.INCREASING
    if obv_trend == "down":
        return VolumeContext.DECREASING

    if avg_volume and prev_avg_volume:
        if avg_volume > prev_avg_volume:
            return VolumeContext.INCREASING
        if avg_volume < prev_avg_volume:
            return VolumeContext.DECREASING

    return VolumeContext.NEUTRAL


def volatility_state(
    bb_squeeze: Optional[int],
    atr_percent: Optional[float],
    thresholds: Optional[StateThresholds] = None,
) -> VolatilityState:
    t = thresholds or StateThresholds()

    # Squeeze means compression regardless of ATR
    if bb_squeeze == 1:
        return VolatilityState.LOW

    if atr_percent is not None:
        if atr_percent < t.atr_low_percent:
            return VolatilityState.LOW
        if atr_percent > t.atr_high_percent:
            return VolatilityState.HIGH

    return VolatilityState.NORMAL


class StateClassifier:
    """Builds MarketState and the narrative payload from a snapshot."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()

    def classify(self, snapshot: IndicatorSnapshot) -> MarketState:
        t = self.config.state
        return MarketState(
            trend_bias=trend_bias(snapshot.price, snapshot.ema_fast, snapshot.ema_slow, snapshot.vwap),
            momentum_state=momentum_state(snapshot.rsi, snapshot.macd, t),
            volume_context=volume_context(
                snapshot.obv_trend, snapshot.avg_volume, snapshot.prev_avg_volume
            ),
            volatility_state=volatility_state(snapshot.bb_squeeze, snapshot.atr_percent, t),
        )

    def build_summary(
        self,
        snapshot: IndicatorSnapshot,
        timeframe: str,
        state: Optional[MarketState] = None,
    ) -> TechnicalSummary:
        """Combined indicators + states object for narrative consumers."""
        state = state or self.classify(snapshot)
        return TechnicalSummary(
            symbol=snapshot.symbol,
            timeframe=timeframe,
            price=snapshot.price,
            indicators=raw_values(snapshot),
            trend_bias=state.trend_bias,
            momentum_state=state.momentum_state,
            volume_context=state.volume_context,
            volatility_state=state.volatility_state,
        )
