"""
CONTRACT 2: Indicator Results & Market State

Output of the scoring layer for a single symbol. The MarketState field
names and enum values are a stable contract: narrative consumers read
them verbatim.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class Signal(str, Enum):
    BULLISH = "bullish"
    NEUTRAL = "neutral"
    BEARISH = "bearish"


class Recommendation(str, Enum):
    STRONG_SELL = "strong_sell"
    SELL = "sell"
    HOLD = "hold"
    BUY = "buy"
    STRONG_BUY = "strong_buy"

    @property
    def rank(self) -> int:
        """Ordinal rank, strong_sell lowest."""
        return _RECOMMENDATION_ORDER.index(self)


_RECOMMENDATION_ORDER = [
    Recommendation.STRONG_SELL,
    Recommendation.SELL,
    Recommendation.HOLD,
    Recommendation.BUY,
    Recommendation.STRONG_BUY,
]


class TrendBias(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class MomentumState(str, Enum):
    STRONG = "strong"
    WEAK = "weak"
    OVERSOLD = "oversold"
    OVERBOUGHT = "overbought"
    NEUTRAL = "neutral"


class VolumeContext(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    NEUTRAL = "neutral"


class VolatilityState(str, Enum):
    HIGH = "high"
    LOW = "low"
    NORMAL = "normal"


# =============================================================================
# OUTPUT: Per-indicator result
# =============================================================================


class IndicatorResult(BaseModel):
    """Normalized output of one indicator."""

    value: Optional[float] = Field(..., description="Raw indicator output, None when data is insufficient")
    signal: Signal
    score: float = Field(..., description="Clamped contribution to the composite score")
    tier: int = Field(..., ge=1, le=3, description="1 = primary, 3 = context")
    description: str

    class Config:
        frozen = True

    @property
    def available(self) -> bool:
        return self.value is not None


# =============================================================================
# OUTPUT: Market state
# =============================================================================


class MarketState(BaseModel):
    """The four coarse classifications of a symbol."""

    trend_bias: TrendBias
    momentum_state: MomentumState
    volume_context: VolumeContext
    volatility_state: VolatilityState

    class Config:
        frozen = True


class TechnicalSummary(BaseModel):
    """
    Combined payload for narrative consumers.
    Consumed by: external summary generators (LLM prompts, reports)
    """

    symbol: str
    timeframe: str
    price: Optional[float]
    indicators: dict[str, Optional[float]] = Field(
        ..., description="Raw indicator values keyed by indicator name"
    )
    trend_bias: TrendBias
    momentum_state: MomentumState
    volume_context: VolumeContext
    volatility_state: VolatilityState

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "symbol": "DASHUSDT",
                "timeframe": "4h",
                "price": 31.42,
                "indicators": {"rsi": 58.3, "macd": 0.12, "atr": 1.7},
                "trend_bias": "bullish",
                "momentum_state": "strong",
                "volume_context": "increasing",
                "volatility_state": "normal",
            }
        }
