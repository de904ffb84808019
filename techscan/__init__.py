"""
techscan

Technical indicator scoring and classification engine: turns OHLCV
candles into per-indicator scores, a composite recommendation and a
small set of market states, and ranks a universe of symbols by them.
"""

__version__ = "0.1.0"
