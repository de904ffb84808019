"""
Market Scanner

CONTRACT:
    Input:  ScanFilters (+ optional symbol universe)
    Output: ScanResponse

Fetches candles through a CandleSupplier, scores every symbol and ranks
the results. Per-symbol failures become skips.
"""

from techscan.services.scanner.filters import UniverseFilter
from techscan.services.scanner.scanner import MarketScanner, get_scanner

__all__ = ["MarketScanner", "UniverseFilter", "get_scanner"]
