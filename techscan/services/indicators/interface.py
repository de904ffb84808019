"""
Indicator Engine Service Interface

Defines the contract for the indicator calculation layer.
"""

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from techscan.services.base import BaseService
from techscan.schemas.market import CandleSeries


@dataclass(frozen=True)
class IndicatorReading:
    """
    Raw output of one indicator before normalization.

    value is what gets displayed; rule_input is what the normalization
    rule compares (e.g. MACD shows the MACD line but scores on the
    histogram). label is set by indicators that classify themselves.
    """

    value: Optional[float]
    rule_input: Optional[float] = None
    label: Optional[str] = None

    @property
    def basis(self) -> Optional[float]:
        return self.value if self.rule_input is None else self.rule_input


@dataclass(frozen=True)
class IndicatorSnapshot:
    """All raw readings for one series plus the inputs of the state tables."""

    symbol: str
    price: Optional[float]
    readings: dict[str, IndicatorReading] = field(default_factory=dict)
    ema_fast: Optional[float] = None
    ema_slow: Optional[float] = None
    vwap: Optional[float] = None
    rsi: Optional[float] = None
    macd: Optional[float] = None
    adx: Optional[float] = None
    obv_trend: Optional[str] = None
    avg_volume: Optional[float] = None
    prev_avg_volume: Optional[float] = None
    bb_squeeze: Optional[int] = None
    atr_percent: Optional[float] = None


class IndicatorServiceInterface(BaseService[CandleSeries, IndicatorSnapshot]):
    """
    Indicator Engine Service Contract.

    INPUT: CandleSeries
        - candles for one symbol and timeframe, oldest first

    OUTPUT: IndicatorSnapshot
        - raw reading per indicator name (value None when the series is
          shorter than the indicator's lookback)
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    @abstractmethod
    async def execute(self, input_data: CandleSeries) -> IndicatorSnapshot:
        """Calculate indicators for one series."""
        pass

    @abstractmethod
    def calculate(self, series: CandleSeries) -> IndicatorSnapshot:
        """
        Calculate every indicator for a series, synchronously.

        Never raises for short series: indicators without enough history
        read as None.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        pass
