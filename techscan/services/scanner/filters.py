"""
Universe Filters

Decides which symbols are worth fetching at all, before any candles
are requested. Checks run on the base asset (the symbol with a known
quote asset stripped).
"""

import logging
import re
from typing import Iterable, Optional

from techscan.core.config import UniverseRules
from techscan.schemas.scanner import ScanFilters
from techscan.services.base import ConfigurationError

logger = logging.getLogger(__name__)


def _compile(pattern: str) -> re.Pattern:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigurationError("UniverseFilter", f"Invalid symbol pattern {pattern!r}: {e}")


class UniverseFilter:
    """Stablecoin, leveraged-token and allow/deny filtering of symbols."""

    def __init__(self, rules: Optional[UniverseRules] = None):
        self.rules = rules or UniverseRules()
        # Longest first so "FDUSD" is stripped before "USD"-like suffixes
        self._quote_assets = sorted(
            (q.upper() for q in self.rules.quote_assets), key=len, reverse=True
        )
        self._stablecoins = {s.upper() for s in self.rules.stablecoins}
        self._leveraged = [_compile(p) for p in self.rules.leveraged_patterns]
        self._deny = [_compile(p) for p in self.rules.deny_patterns]
        self._allow = _compile(self.rules.allow_pattern) if self.rules.allow_pattern else None

    def base_asset(self, symbol: str) -> str:
        symbol = symbol.upper()
        for quote in self._quote_assets:
            if symbol.endswith(quote) and len(symbol) > len(quote):
                return symbol[: -len(quote)]
        return symbol

    def is_stablecoin(self, symbol: str) -> bool:
        return self.base_asset(symbol) in self._stablecoins

    def is_leveraged(self, symbol: str) -> bool:
        base = self.base_asset(symbol)
        return any(pattern.search(base) for pattern in self._leveraged)

    def exclusion_reason(self, symbol: str, filters: ScanFilters) -> Optional[str]:
        """Why a symbol is dropped from the universe, or None to keep it."""
        symbol = symbol.upper()
        if self._allow is not None and not self._allow.search(symbol):
            return "not-allowed"
        if any(pattern.search(symbol) for pattern in self._deny):
            return "denied"
        if filters.exclude_stablecoins and self.is_stablecoin(symbol):
            return "stablecoin"
        if filters.exclude_leveraged and self.is_leveraged(symbol):
            return "leveraged"
        return None

    def apply(self, symbols: Iterable[str], filters: ScanFilters) -> list[str]:
        """Upper-case, de-duplicate (first occurrence wins) and filter symbols."""
        universe: list[str] = []
        seen: set[str] = set()
        for raw in symbols:
            symbol = raw.strip().upper()
            if not symbol or symbol in seen:
                continue
            seen.add(symbol)
            reason = self.exclusion_reason(symbol, filters)
            if reason:
                logger.debug(f"Excluding {symbol}: {reason}")
                continue
            universe.append(symbol)
        return universe
