"""
CONTRACT 1: Candle Input

Input to the engine: an ordered, immutable series of OHLCV candles for
one (symbol, timeframe) pair, as delivered by a CandleSupplier.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

import numpy as np
from pydantic import BaseModel, Field, model_validator


# =============================================================================
# ENUMS
# =============================================================================


class Timeframe(str, Enum):
    M15 = "15m"
    H1 = "1h"
    H4 = "4h"
    D1 = "1d"
    W1 = "1w"


# Timeframe to milliseconds
TIMEFRAME_MS = {
    Timeframe.M15: 900_000,
    Timeframe.H1: 3_600_000,
    Timeframe.H4: 14_400_000,
    Timeframe.D1: 86_400_000,
    Timeframe.W1: 604_800_000,
}


def bars_per_day(timeframe: Timeframe) -> int:
    """Number of candles covering 24 hours (at least one)."""
    return max(1, TIMEFRAME_MS[Timeframe.D1] // TIMEFRAME_MS[timeframe])


# =============================================================================
# CANDLES
# =============================================================================


class Candle(BaseModel):
    """Single candlestick data point."""

    open_time: int = Field(..., ge=0, description="Open time, epoch milliseconds")
    open: float = Field(..., gt=0)
    high: float = Field(..., gt=0)
    low: float = Field(..., gt=0)
    close: float = Field(..., gt=0)
    volume: float = Field(..., ge=0)
    quote_volume: float = Field(default=0.0, ge=0)

    class Config:
        frozen = True

    @model_validator(mode="after")
    def _check_range(self) -> "Candle":
        if self.high < self.low:
            raise ValueError(f"high {self.high} is below low {self.low}")
        return self


class CandleSeries(BaseModel):
    """
    Ordered candles for one symbol and timeframe.

    Insertion order is chronological order; open times are strictly
    increasing, so duplicates are rejected.
    """

    symbol: str = Field(..., min_length=1)
    timeframe: Timeframe
    candles: tuple[Candle, ...] = ()

    class Config:
        frozen = True

    @model_validator(mode="after")
    def _check_order(self) -> "CandleSeries":
        for prev, cur in zip(self.candles, self.candles[1:]):
            if cur.open_time <= prev.open_time:
                raise ValueError(
                    f"{self.symbol}: candle at {cur.open_time} is not after {prev.open_time}"
                )
        return self

    def __len__(self) -> int:
        return len(self.candles)

    @property
    def open_times(self) -> np.ndarray:
        return np.array([c.open_time for c in self.candles], dtype=np.int64)

    @property
    def opens(self) -> np.ndarray:
        return np.array([c.open for c in self.candles], dtype=float)

    @property
    def highs(self) -> np.ndarray:
        return np.array([c.high for c in self.candles], dtype=float)

    @property
    def lows(self) -> np.ndarray:
        return np.array([c.low for c in self.candles], dtype=float)

    @property
    def closes(self) -> np.ndarray:
        return np.array([c.close for c in self.candles], dtype=float)

    @property
    def volumes(self) -> np.ndarray:
        return np.array([c.volume for c in self.candles], dtype=float)

    @property
    def quote_volumes(self) -> np.ndarray:
        """Quote volume per candle; falls back to volume * close where missing."""
        return np.array(
            [c.quote_volume if c.quote_volume > 0 else c.volume * c.close for c in self.candles],
            dtype=float,
        )

    @property
    def price(self) -> Optional[float]:
        """Latest close, or None for an empty series."""
        return self.candles[-1].close if self.candles else None

    @property
    def latest_time(self) -> Optional[datetime]:
        if not self.candles:
            return None
        return datetime.fromtimestamp(self.candles[-1].open_time / 1000, tz=timezone.utc)

    def quote_volume_24h(self) -> float:
        """Quote volume traded over the trailing 24 hours of candles."""
        if not self.candles:
            return 0.0
        window = bars_per_day(self.timeframe)
        return float(np.sum(self.quote_volumes[-window:]))
