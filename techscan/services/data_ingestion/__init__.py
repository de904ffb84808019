"""
Candle Supply

CONTRACT:
    Input:  (symbol, timeframe, limit)
    Output: CandleSeries

The engine never talks to an exchange directly; callers plug in a
CandleSupplier. In-memory and mock suppliers are provided.
"""

from techscan.services.data_ingestion.interface import CandleSupplier
from techscan.services.data_ingestion.memory import InMemoryCandleSupplier
from techscan.services.data_ingestion.mock_data import (
    MockCandleSupplier,
    generate_mock_candles,
)

__all__ = [
    "CandleSupplier",
    "InMemoryCandleSupplier",
    "MockCandleSupplier",
    "generate_mock_candles",
]
