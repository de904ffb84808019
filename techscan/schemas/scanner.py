"""
CONTRACT 3: Scanner

Input: ScanFilters
Output: ScanResponse (ranked AnalysisResult list + echoed filters)
"""

import math
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from techscan.schemas.indicators import (
    IndicatorResult,
    MarketState,
    Recommendation,
)
from techscan.schemas.market import Timeframe
from techscan.services.base import ConfigurationError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _first(value: Any) -> Any:
    """Repeated query parameters arrive as lists; the first one wins."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigurationError("ScanFilters", f"Invalid {name}: {value!r}")


def _parse_number(name: str, value: Any, cast=float):
    try:
        number = cast(value)
    except (TypeError, ValueError):
        raise ConfigurationError("ScanFilters", f"Invalid {name}: {value!r}")
    if not math.isfinite(number):
        raise ConfigurationError("ScanFilters", f"Invalid {name}: {value!r}")
    return number


# =============================================================================
# INPUT: ScanFilters
# =============================================================================


class ScanFilters(BaseModel):
    """
    Filters for one scan call.
    Sent by: API layer / CLI
    Received by: MarketScanner
    """

    timeframe: Timeframe = Field(default=Timeframe.D1, description="Candle timeframe")
    min_score: Optional[float] = Field(default=None, description="Drop results scoring below this")
    exclude_stablecoins: bool = Field(default=True, description="Skip stablecoin base assets")
    exclude_leveraged: bool = Field(default=True, description="Skip leveraged tokens (UP/DOWN/3L/...)")
    min_liquidity: Optional[float] = Field(
        default=None, ge=0, description="Minimum 24h quote volume"
    )
    limit: Optional[int] = Field(default=None, ge=1, description="Cap on returned results")
    bullish_only: bool = Field(default=False, description="Keep only bullish setups")

    class Config:
        frozen = True

    @classmethod
    def from_query(cls, query: Mapping[str, Any]) -> "ScanFilters":
        """
        Build filters from raw query parameters.

        The timeframe is read from `tf`, falling back to `timeframe`.
        Missing keys keep their defaults; anything unparseable raises
        ConfigurationError.
        """
        params = {key: _first(value) for key, value in query.items()}
        values: dict[str, Any] = {}

        raw_tf = params.get("tf")
        if raw_tf is None:
            raw_tf = params.get("timeframe")
        if raw_tf is not None:
            try:
                values["timeframe"] = Timeframe(str(raw_tf).strip())
            except ValueError:
                raise ConfigurationError(
                    "ScanFilters", "Invalid timeframe", {"timeframe": raw_tf}
                )

        for key in ("min_score", "min_liquidity"):
            if params.get(key) not in (None, ""):
                values[key] = _parse_number(key, params[key])
        if params.get("limit") not in (None, ""):
            values["limit"] = _parse_number("limit", params["limit"], int)
        for key in ("exclude_stablecoins", "exclude_leveraged", "bullish_only"):
            if params.get(key) not in (None, ""):
                values[key] = _parse_bool(key, params[key])

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError("ScanFilters", "Invalid scan filters", {"errors": e.errors()})

    def echo(self) -> dict:
        """Filter values echoed back with the scan results."""
        return {
            "timeframe": self.timeframe.value,
            "min_score": self.min_score,
            "exclude_stablecoins": self.exclude_stablecoins,
            "exclude_leveraged": self.exclude_leveraged,
            "min_liquidity": self.min_liquidity,
            "limit": self.limit,
            "bullish_only": self.bullish_only,
        }


# =============================================================================
# OUTPUT: AnalysisResult
# =============================================================================


class AnalysisMeta(BaseModel):
    """Traceability data attached to every analysis."""

    timeframe: Timeframe
    candle_count: int = Field(..., ge=0)
    latest_candle_time: Optional[int] = Field(default=None, description="Open time of the last candle, epoch ms")
    quote_volume_24h: float = Field(..., ge=0)
    config_version: str

    class Config:
        frozen = True


class AnalysisResult(BaseModel):
    """
    Complete analysis for a symbol.
    Returned by: MarketScanner
    Consumed by: ranking, display, narrative generation
    """

    symbol: str
    price: float
    indicators: dict[str, Optional[IndicatorResult]] = Field(
        ..., description="None marks an indicator disabled by configuration"
    )
    total_score: float
    recommendation: Recommendation
    state: MarketState
    passes: bool = Field(..., description="Recommendation is buy or strong_buy")
    passes_detail: dict[str, bool] = Field(..., description="Per-category pass flags")
    bullish_setup: bool = False
    meta: AnalysisMeta

    class Config:
        frozen = True


class SkipReason(str, Enum):
    FETCH_FAILED = "fetch_failed"
    NO_DATA = "no_data"
    CANCELLED = "cancelled"
    ANALYSIS_FAILED = "analysis_failed"


class SymbolSkip(BaseModel):
    """A symbol that produced no result, and why."""

    symbol: str
    reason: SkipReason
    detail: str = ""

    class Config:
        frozen = True


# =============================================================================
# OUTPUT: ScanResponse
# =============================================================================


class ScanResponse(BaseModel):
    """Ranked scan output."""

    results: list[AnalysisResult]
    filters: dict
    skipped: list[SymbolSkip] = []
    scanned: int = Field(..., ge=0, description="Symbols in the filtered universe")
    cancelled: bool = False

    @property
    def count(self) -> int:
        return len(self.results)
