"""
Schema Contracts

JSON contracts between the engine's components and its callers.
"""

from techscan.schemas.market import (
    Timeframe,
    Candle,
    CandleSeries,
)
from techscan.schemas.indicators import (
    Signal,
    Recommendation,
    TrendBias,
    MomentumState,
    VolumeContext,
    VolatilityState,
    IndicatorResult,
    MarketState,
    TechnicalSummary,
)
from techscan.schemas.scanner import (
    ScanFilters,
    AnalysisMeta,
    AnalysisResult,
    SkipReason,
    SymbolSkip,
    ScanResponse,
)

__all__ = [
    # Market
    "Timeframe",
    "Candle",
    "CandleSeries",
    # Indicators
    "Signal",
    "Recommendation",
    "TrendBias",
    "MomentumState",
    "VolumeContext",
    "VolatilityState",
    "IndicatorResult",
    "MarketState",
    "TechnicalSummary",
    # Scanner
    "ScanFilters",
    "AnalysisMeta",
    "AnalysisResult",
    "SkipReason",
    "SymbolSkip",
    "ScanResponse",
]
