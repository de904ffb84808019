"""
Market Scanner Service

Runs the per-symbol pipeline (candles -> indicators -> scores -> states)
across a universe of symbols and ranks the results.
"""

import asyncio
import logging
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from techscan.core.config import ScoringConfig, Settings, get_scoring_config, get_settings
from techscan.schemas.indicators import TechnicalSummary
from techscan.schemas.market import CandleSeries, Timeframe
from techscan.schemas.scanner import (
    AnalysisMeta,
    AnalysisResult,
    ScanFilters,
    ScanResponse,
    SkipReason,
    SymbolSkip,
)
from techscan.services.base import BaseService, ConfigurationError, ServiceError
from techscan.services.data_ingestion.interface import CandleSupplier
from techscan.services.data_ingestion.mock_data import MockCandleSupplier
from techscan.services.indicators.service import IndicatorService
from techscan.services.scanner.filters import UniverseFilter
from techscan.services.scoring.classifier import StateClassifier
from techscan.services.scoring.composite import CompositeScorer
from techscan.services.scoring.normalizer import ScoreNormalizer

logger = logging.getLogger(__name__)

# What one symbol's pipeline produces: a result, a skip, or None when filtered out
SymbolOutcome = Union[AnalysisResult, SymbolSkip, None]


class MarketScanner(BaseService[ScanFilters, ScanResponse]):
    """
    Scans a universe of symbols and ranks them by composite score.

    Usage:
        scanner = MarketScanner(supplier)
        response = await scanner.scan(ScanFilters(timeframe="4h", limit=10))

    Each symbol is analyzed independently; a failing symbol is reported in
    `skipped` and never aborts the scan.
    """

    def __init__(
        self,
        supplier: Optional[CandleSupplier] = None,
        config: Optional[ScoringConfig] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.config = config or get_scoring_config()
        if supplier is None:
            logger.info("No candle supplier given, using mock candles")
            supplier = MockCandleSupplier()
        self.supplier = supplier

        self._indicators = IndicatorService(self.config)
        self._normalizer = ScoreNormalizer(self.config)
        self._classifier = StateClassifier(self.config)
        self._composite = CompositeScorer(self.config)
        self._universe = UniverseFilter(self.config.universe)

    @property
    def name(self) -> str:
        return "MarketScanner"

    async def execute(self, input_data: ScanFilters) -> ScanResponse:
        return await self.scan(input_data)

    async def health_check(self) -> bool:
        try:
            return await self.supplier.health_check()
        except Exception as e:
            logger.warning(f"Candle supplier health check failed: {e}")
            return False

    def validate_filters(
        self, filters: Union[ScanFilters, Mapping[str, Any], None] = None
    ) -> ScanFilters:
        """Turn whatever the caller passed into ScanFilters, or raise ConfigurationError."""
        if isinstance(filters, ScanFilters):
            return filters
        if filters is None:
            try:
                return ScanFilters(timeframe=self.settings.default_timeframe)
            except ValidationError:
                raise ConfigurationError(
                    self.name,
                    "Invalid timeframe",
                    {"timeframe": self.settings.default_timeframe},
                )
        if isinstance(filters, Mapping):
            return ScanFilters.from_query(filters)
        raise ConfigurationError(self.name, f"Unsupported filters type: {type(filters).__name__}")

    # =========================================================================
    # SINGLE SYMBOL
    # =========================================================================

    def analyze(self, series: CandleSeries) -> AnalysisResult:
        """
        Run the full pipeline for one series.

        Deterministic: the same series always yields an equal result.
        """
        if len(series) == 0:
            raise ServiceError(self.name, f"No candles for {series.symbol}")

        snapshot = self._indicators.calculate(series)
        indicators = self._normalizer.normalize_all(snapshot)
        state = self._classifier.classify(snapshot)
        total_score = self._composite.total_score(indicators)
        recommendation = self._composite.recommendation(total_score)

        return AnalysisResult(
            symbol=series.symbol,
            price=snapshot.price,
            indicators=indicators,
            total_score=total_score,
            recommendation=recommendation,
            state=state,
            passes=self._composite.passes(recommendation),
            passes_detail=self._composite.passes_detail(indicators),
            bullish_setup=self._composite.is_bullish_setup(indicators, total_score),
            meta=AnalysisMeta(
                timeframe=series.timeframe,
                candle_count=len(series),
                latest_candle_time=series.candles[-1].open_time,
                quote_volume_24h=series.quote_volume_24h(),
                config_version=self.config.version,
            ),
        )

    def summarize(self, series: CandleSeries) -> TechnicalSummary:
        """Raw indicator values plus market states, for narrative consumers."""
        snapshot = self._indicators.calculate(series)
        return self._classifier.build_summary(snapshot, series.timeframe.value)

    async def analyze_symbol(
        self, symbol: str, timeframe: Optional[Timeframe] = None
    ) -> AnalysisResult:
        """Fetch candles for one symbol and analyze them."""
        if timeframe is None:
            timeframe = self.validate_filters().timeframe
        series = await self.supplier.get_candles(
            symbol.upper(), timeframe, self.settings.candle_lookback
        )
        return self.analyze(series)

    async def _scan_symbol(self, symbol: str, filters: ScanFilters) -> SymbolOutcome:
        try:
            series = await self.supplier.get_candles(
                symbol, filters.timeframe, self.settings.candle_lookback
            )
        except Exception as e:
            logger.warning(f"Candle fetch failed for {symbol}: {e}")
            return SymbolSkip(symbol=symbol, reason=SkipReason.FETCH_FAILED, detail=str(e))

        if len(series) == 0:
            logger.debug(f"No candles for {symbol}")
            return SymbolSkip(symbol=symbol, reason=SkipReason.NO_DATA)

        if filters.min_liquidity is not None and series.quote_volume_24h() < filters.min_liquidity:
            logger.debug(f"{symbol} below minimum liquidity")
            return None

        try:
            result = self.analyze(series)
        except Exception as e:
            logger.warning(f"Analysis failed for {symbol}: {e}")
            return SymbolSkip(symbol=symbol, reason=SkipReason.ANALYSIS_FAILED, detail=str(e))

        if filters.min_score is not None and result.total_score < filters.min_score:
            return None
        if filters.bullish_only and not result.bullish_setup:
            return None
        return result

    # =========================================================================
    # SCAN
    # =========================================================================

    async def scan(
        self,
        filters: Union[ScanFilters, Mapping[str, Any], None] = None,
        symbols: Optional[Iterable[str]] = None,
        cancel_event: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> ScanResponse:
        """
        Scan symbols concurrently and return ranked results.

        Args:
            filters: ScanFilters or raw query parameters
            symbols: Universe to scan (defaults to supplier.list_symbols())
            cancel_event: Setting it stops the scan early
            timeout: Seconds before the scan stops (defaults to settings)

        Symbols still pending when the scan stops are reported as
        cancelled; finished results are kept.
        """
        filters = self.validate_filters(filters)
        if timeout is None:
            timeout = self.settings.scan_timeout_seconds

        if symbols is None:
            symbols = await self.supplier.list_symbols()
        universe = self._universe.apply(symbols, filters)
        logger.info(f"Scanning {len(universe)} symbols on {filters.timeframe.value}")

        cancel_event = cancel_event or asyncio.Event()
        semaphore = asyncio.Semaphore(self.settings.scan_concurrency)

        async def run(symbol: str) -> SymbolOutcome:
            async with semaphore:
                if cancel_event.is_set():
                    return SymbolSkip(symbol=symbol, reason=SkipReason.CANCELLED)
                return await self._scan_symbol(symbol, filters)

        tasks = {symbol: asyncio.create_task(run(symbol)) for symbol in universe}
        pending = await self._wait(set(tasks.values()), cancel_event, timeout)

        stopped = bool(pending) or cancel_event.is_set()
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        results: list[AnalysisResult] = []
        skipped: list[SymbolSkip] = []
        for symbol, task in tasks.items():
            outcome = (
                SymbolSkip(symbol=symbol, reason=SkipReason.CANCELLED)
                if task.cancelled()
                else task.result()
            )
            if isinstance(outcome, AnalysisResult):
                results.append(outcome)
            elif isinstance(outcome, SymbolSkip):
                skipped.append(outcome)

        results.sort(key=lambda r: (-r.total_score, r.symbol))
        if filters.limit is not None:
            results = results[: filters.limit]

        if stopped:
            logger.warning(f"Scan stopped early, {len(pending)} symbols cancelled")
        logger.info(
            f"Scan complete: {len(results)} results, {len(skipped)} skipped "
            f"of {len(universe)} symbols"
        )

        return ScanResponse(
            results=results,
            filters=filters.echo(),
            skipped=skipped,
            scanned=len(universe),
            cancelled=stopped,
        )

    @staticmethod
    async def _wait(
        pending: set[asyncio.Task],
        cancel_event: asyncio.Event,
        timeout: Optional[float],
    ) -> set[asyncio.Task]:
        """Wait for tasks until all finish, the event is set, or time runs out."""
        if not pending:
            return pending

        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout if timeout else None
        waiter = asyncio.create_task(cancel_event.wait())
        try:
            while pending and not cancel_event.is_set():
                remaining = None if deadline is None else deadline - loop.time()
                if remaining is not None and remaining <= 0:
                    break
                done, _ = await asyncio.wait(
                    pending | {waiter},
                    timeout=remaining,
                    return_when=asyncio.FIRST_COMPLETED,
                )
                pending = pending - done
        finally:
            waiter.cancel()
        return pending


# Singleton instance
_scanner: Optional[MarketScanner] = None


def get_scanner() -> MarketScanner:
    """Get the scanner singleton."""
    global _scanner
    if _scanner is None:
        _scanner = MarketScanner()
    return _scanner
