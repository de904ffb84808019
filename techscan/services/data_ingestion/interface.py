"""
Candle Supplier Interface

Defines the contract for whatever delivers candles to the scanner
(exchange client, cache, fixtures). Fetching itself lives outside the
engine; the scanner only depends on this boundary.
"""

from abc import ABC, abstractmethod

from techscan.schemas.market import CandleSeries, Timeframe


class CandleSupplier(ABC):
    """
    Candle Supplier Contract.

    INPUT: (symbol, timeframe, limit)

    OUTPUT: CandleSeries
        - candles in ascending open-time order, at most `limit` of them
        - should cover the longest indicator lookback (168+ bars
          recommended for multi-day context)

    Raises DataFetchError (or any exception) on failure; the scanner
    records the symbol as skipped and carries on.
    """

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    async def get_candles(self, symbol: str, timeframe: Timeframe, limit: int) -> CandleSeries:
        """Fetch the most recent `limit` candles for a symbol."""
        pass

    @abstractmethod
    async def list_symbols(self) -> list[str]:
        """Default market universe, most liquid first."""
        pass

    async def health_check(self) -> bool:
        """Check connectivity to the data source."""
        return True
