"""Shared fixtures: hand-built candle series."""

from typing import Optional, Sequence

import numpy as np
import pytest

from techscan.core.config import ScoringConfig, Settings
from techscan.schemas.market import TIMEFRAME_MS, Candle, CandleSeries, Timeframe

START_MS = 1_700_000_000_000


def make_series(
    symbol: str,
    closes: Sequence[float],
    timeframe: Timeframe = Timeframe.D1,
    highs: Optional[Sequence[float]] = None,
    lows: Optional[Sequence[float]] = None,
    volumes: Optional[Sequence[float]] = None,
) -> CandleSeries:
    """Series from closes; highs/lows default to close +/- 1%."""
    interval = TIMEFRAME_MS[timeframe]
    candles = []
    for i, close in enumerate(closes):
        high = highs[i] if highs is not None else close * 1.01
        low = lows[i] if lows is not None else close * 0.99
        volume = volumes[i] if volumes is not None else 1000.0
        candles.append(
            Candle(
                open_time=START_MS + i * interval,
                open=close,
                high=high,
                low=low,
                close=close,
                volume=volume,
            )
        )
    return CandleSeries(symbol=symbol, timeframe=timeframe, candles=candles)


def trending_closes(count: int, start: float = 100.0, step: float = 0.5) -> list[float]:
    """Steady trend with a small wiggle so oscillators stay defined."""
    return [start + step * i + (0.3 if i % 2 else -0.3) for i in range(count)]


@pytest.fixture
def config() -> ScoringConfig:
    return ScoringConfig()


@pytest.fixture
def settings() -> Settings:
    return Settings(candle_lookback=200, scan_concurrency=4, scan_timeout_seconds=5.0)


@pytest.fixture
def uptrend_series() -> CandleSeries:
    return make_series("BTCUSDT", trending_closes(120, start=100.0, step=0.5))


@pytest.fixture
def downtrend_series() -> CandleSeries:
    return make_series("ETHUSDT", trending_closes(120, start=200.0, step=-0.5))


@pytest.fixture
def flat_series() -> CandleSeries:
    closes = np.full(60, 50.0)
    return make_series("FLATUSDT", closes, highs=closes, lows=closes)
