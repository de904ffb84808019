"""
Mock Data Generator

Generates realistic, reproducible mock candles for development and
demos. Each symbol gets its own seeded random walk, so repeated calls
return identical series.
"""

import random
import zlib
from typing import Optional

from techscan.schemas.market import TIMEFRAME_MS, Candle, CandleSeries, Timeframe
from techscan.services.data_ingestion.interface import CandleSupplier


# Base prices for common symbols
SYMBOL_BASE_PRICES = {
    "BTCUSDT": 45000.0,
    "ETHUSDT": 3000.0,
    "BNBUSDT": 400.0,
    "SOLUSDT": 100.0,
    "ADAUSDT": 0.5,
    "XRPUSDT": 0.6,
    "DOTUSDT": 7.0,
    "AVAXUSDT": 35.0,
    "LINKUSDT": 15.0,
    "LTCUSDT": 70.0,
    "ATOMUSDT": 9.0,
    "USDCUSDT": 1.0,
}

# Default universe when no symbols are given
DEFAULT_SYMBOLS = list(SYMBOL_BASE_PRICES)

# 2024-01-01T00:00:00Z
DEFAULT_END_TIME_MS = 1_704_067_200_000


def _seed(symbol: str, timeframe: Timeframe) -> int:
    return zlib.crc32(f"{symbol}:{timeframe.value}".encode("utf-8"))


def get_base_price(symbol: str, rng: random.Random) -> float:
    """Get base price for a symbol."""
    return SYMBOL_BASE_PRICES.get(symbol, 10.0 + rng.random() * 90)


def generate_mock_candles(
    symbol: str,
    timeframe: Timeframe,
    lookback: int,
    end_time_ms: Optional[int] = None,
) -> CandleSeries:
    """Generate mock OHLCV candles as a seeded random walk."""
    rng = random.Random(_seed(symbol, timeframe))
    if end_time_ms is None:
        end_time_ms = DEFAULT_END_TIME_MS

    interval_ms = TIMEFRAME_MS[timeframe]
    price = get_base_price(symbol, rng)
    stable = symbol in ("USDCUSDT",)
    volatility = price * (0.0005 if stable else 0.02)  # 2% volatility
    drift = 0.0 if stable else (rng.random() - 0.5) * volatility * 0.2

    timestamp = end_time_ms - interval_ms * lookback
    candles = []

    for _ in range(lookback):
        # Random walk
        change = (rng.random() - 0.5) * volatility + drift

        open_price = price
        close_price = max(open_price + change, price * 0.5)
        high_price = max(open_price, close_price) + rng.random() * volatility * 0.5
        low_price = max(min(open_price, close_price) - rng.random() * volatility * 0.5, close_price * 0.5)
        volume = rng.uniform(100_000, 5_000_000)

        candles.append(
            Candle(
                open_time=timestamp,
                open=open_price,
                high=high_price,
                low=low_price,
                close=close_price,
                volume=volume,
                quote_volume=volume * close_price,
            )
        )

        price = close_price
        timestamp += interval_ms

    return CandleSeries(symbol=symbol, timeframe=timeframe, candles=candles)


class MockCandleSupplier(CandleSupplier):
    """Supplier returning generated candles for any symbol."""

    def __init__(self, symbols: Optional[list[str]] = None, end_time_ms: Optional[int] = None):
        self._symbols = symbols or DEFAULT_SYMBOLS
        self._end_time_ms = end_time_ms

    async def get_candles(self, symbol: str, timeframe: Timeframe, limit: int) -> CandleSeries:
        return generate_mock_candles(symbol, timeframe, limit, self._end_time_ms)

    async def list_symbols(self) -> list[str]:
        return list(self._symbols)
