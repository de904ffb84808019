"""
In-Memory Candle Supplier

Serves pre-fetched candle series, e.g. from a caller's own cache or a
test fixture.
"""

import logging
from typing import Iterable

from techscan.schemas.market import CandleSeries, Timeframe
from techscan.services.base import DataFetchError
from techscan.services.data_ingestion.interface import CandleSupplier

logger = logging.getLogger(__name__)


class InMemoryCandleSupplier(CandleSupplier):
    """Supplier backed by a dict keyed by (symbol, timeframe)."""

    def __init__(self, series: Iterable[CandleSeries] = ()):
        self._series: dict[tuple[str, Timeframe], CandleSeries] = {}
        self._order: list[str] = []
        for item in series:
            self.add(item)

    def add(self, series: CandleSeries) -> None:
        symbol = series.symbol.upper()
        self._series[(symbol, series.timeframe)] = series
        if symbol not in self._order:
            self._order.append(symbol)

    async def get_candles(self, symbol: str, timeframe: Timeframe, limit: int) -> CandleSeries:
        series = self._series.get((symbol.upper(), timeframe))
        if series is None:
            raise DataFetchError(self.name, f"No {timeframe.value} candles for {symbol}")
        if len(series) > limit:
            return CandleSeries(
                symbol=series.symbol,
                timeframe=series.timeframe,
                candles=series.candles[-limit:],
            )
        return series

    async def list_symbols(self) -> list[str]:
        return list(self._order)
