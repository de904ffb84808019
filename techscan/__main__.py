"""
Command-line scan.

Run with: python -m techscan --tf 4h --limit 10
Uses mock candles unless a caller wires in a real CandleSupplier.
"""

import argparse
import asyncio
import sys

from dotenv import load_dotenv

from techscan.core.logging_config import configure_logging
from techscan.schemas.scanner import ScanFilters, ScanResponse
from techscan.services.base import ConfigurationError
from techscan.services.scanner.scanner import MarketScanner


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Technical indicator scan")
    parser.add_argument("symbols", nargs="*", help="Symbols to scan (default: supplier universe)")
    parser.add_argument("--tf", help="Timeframe: 15m, 1h, 4h, 1d or 1w")
    parser.add_argument("--min-score", help="Drop results scoring below this")
    parser.add_argument("--min-liquidity", help="Minimum 24h quote volume")
    parser.add_argument("--limit", help="Cap on returned results")
    parser.add_argument("--bullish-only", action="store_true", help="Keep only bullish setups")
    parser.add_argument(
        "--include-stablecoins", action="store_true", help="Do not skip stablecoin pairs"
    )
    parser.add_argument("--json", action="store_true", help="Print the raw JSON response")
    return parser


def filters_from_args(args: argparse.Namespace) -> ScanFilters:
    query = {
        "tf": args.tf,
        "min_score": args.min_score,
        "min_liquidity": args.min_liquidity,
        "limit": args.limit,
        "bullish_only": args.bullish_only,
        "exclude_stablecoins": not args.include_stablecoins,
    }
    return ScanFilters.from_query({k: v for k, v in query.items() if v is not None})


def print_response(response: ScanResponse) -> None:
    print(f"Timeframe: {response.filters['timeframe']}  scanned: {response.scanned}")
    print("-" * 60)
    for rank, result in enumerate(response.results, start=1):
        state = result.state
        print(
            f"{rank:>3}. {result.symbol:<12} {result.total_score:>6.1f}  "
            f"{result.recommendation.value:<11} trend={state.trend_bias.value} "
            f"momentum={state.momentum_state.value}"
        )
    for skip in response.skipped:
        print(f"  skipped {skip.symbol}: {skip.reason.value} {skip.detail}".rstrip())
    if response.cancelled:
        print("Scan stopped before all symbols finished")


async def run(args: argparse.Namespace) -> ScanResponse:
    scanner = MarketScanner()
    filters = filters_from_args(args)
    return await scanner.scan(filters, symbols=args.symbols or None)


def main(argv=None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    configure_logging()

    try:
        response = asyncio.run(run(args))
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2

    if args.json:
        print(response.model_dump_json(indent=2))
    else:
        print_response(response)
    return 0


if __name__ == "__main__":
    sys.exit(main())
