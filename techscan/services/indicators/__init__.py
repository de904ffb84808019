"""
Indicator Engine Service

CONTRACT:
    Input:  CandleSeries (OHLCV candles, oldest first)
    Output: IndicatorSnapshot

RESPONSIBILITIES:
    - Calculate all technical indicators (EMA, RSI, MACD, MFI, OBV, ...)
    - Calculate volatility metrics (ATR%, Bollinger squeeze)
    - Collect the inputs of the market-state decision tables

Uses NumPy for calculations.
All math is deterministic and reproducible.
"""

from techscan.services.indicators.interface import (
    IndicatorServiceInterface,
    IndicatorReading,
    IndicatorSnapshot,
)
from techscan.services.indicators.service import (
    IndicatorService,
    get_indicator_service,
    raw_values,
)

__all__ = [
    "IndicatorServiceInterface",
    "IndicatorReading",
    "IndicatorSnapshot",
    "IndicatorService",
    "get_indicator_service",
    "raw_values",
]
