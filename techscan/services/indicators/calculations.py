"""
Technical Indicator Calculations

Pure NumPy implementations of technical indicators.
Every function is deterministic and returns a full-length array with NaN
where the indicator is not yet defined; use get_last_valid() to read the
latest value.
"""

from typing import Callable, Optional

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view


def _undefined(length: int) -> np.ndarray:
    return np.full(length, np.nan)


def _windows(data: np.ndarray, period: int) -> Optional[np.ndarray]:
    """Trailing windows of `period` values, one row per defined index."""
    if period <= 0 or len(data) < period:
        return None
    return sliding_window_view(np.asarray(data, dtype=float), period)


def _rolling(data: np.ndarray, period: int, reducer: Callable) -> np.ndarray:
    """Apply a reducer (np.mean, np.max, ...) over trailing windows."""
    result = _undefined(len(data))
    windows = _windows(data, period)
    if windows is not None:
        result[period - 1 :] = reducer(windows, axis=1)
    return result


def _typical_price(highs: np.ndarray, lows: np.ndarray, closes: np.ndarray) -> np.ndarray:
    return (highs + lows + closes) / 3


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def sma(data: np.ndarray, period: int) -> np.ndarray:
    """Simple Moving Average."""
    return _rolling(data, period, np.mean)


def ema(data: np.ndarray, period: int) -> np.ndarray:
    """
    Exponential Moving Average.

    Seeded with the first value, so it is defined from the first candle;
    accuracy improves once the series is longer than the period.
    """
    values = np.asarray(data, dtype=float)
    result = _undefined(len(values))
    if len(values) == 0:
        return result

    alpha = 2 / (period + 1)
    current = values[0]
    for i, value in enumerate(values):
        if i > 0:
            current = alpha * value + (1 - alpha) * current
        result[i] = current

    return result


def rma(data: np.ndarray, period: int) -> np.ndarray:
    """Wilder's moving average: SMA seed, then (prev * (n - 1) + x) / n."""
    result = _undefined(len(data))
    if len(data) < period:
        return result

    result[period - 1] = np.mean(data[:period])
    for i in range(period, len(data)):
        result[i] = (result[i - 1] * (period - 1) + data[i]) / period

    return result


# =============================================================================
# MOMENTUM INDICATORS
# =============================================================================


def rsi(closes: np.ndarray, period: int = 14) -> np.ndarray:
    """Relative Strength Index (Wilder). Needs period + 1 closes."""
    result = _undefined(len(closes))
    if len(closes) < period + 1:
        return result

    changes = np.diff(closes)
    avg_gain = rma(np.clip(changes, 0, None), period)
    avg_loss = rma(np.clip(-changes, 0, None), period)

    with np.errstate(divide="ignore", invalid="ignore"):
        values = 100 - 100 / (1 + avg_gain / avg_loss)

    # No losses in the window reads as 100
    result[1:] = np.where(avg_loss == 0, 100.0, values)
    return result


def macd(
    closes: np.ndarray,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    MACD (Moving Average Convergence Divergence).

    Returns: (macd_line, signal_line, histogram)
    """
    line = ema(closes, fast_period) - ema(closes, slow_period)
    signal = ema(line, signal_period)
    return line, signal, line - signal


def _range_position(
    highs: np.ndarray, lows: np.ndarray, period: int
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Highest high, lowest low and their spread over trailing windows."""
    highest = _rolling(highs, period, np.max)
    lowest = _rolling(lows, period, np.min)
    return highest, lowest, highest - lowest


def stochastic(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    k_period: int = 14,
    d_period: int = 3,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Stochastic Oscillator. A flat range reads as 50.

    Returns: (k, d)
    """
    _highest, lowest, spread = _range_position(highs, lows, k_period)
    with np.errstate(divide="ignore", invalid="ignore"):
        k = np.where(spread == 0, 50.0, (closes - lowest) / spread * 100)
    return k, sma(k, d_period)


def williams_r(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 14
) -> np.ndarray:
    """Williams %R. A flat range reads as -50."""
    highest, _lowest, spread = _range_position(highs, lows, period)
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(spread == 0, -50.0, (highest - closes) / spread * -100)


def cci(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 20
) -> np.ndarray:
    """Commodity Channel Index. Zero mean deviation reads as 0."""
    typical = _typical_price(highs, lows, closes)
    result = _undefined(len(typical))
    windows = _windows(typical, period)
    if windows is None:
        return result

    mean = windows.mean(axis=1)
    mean_dev = np.abs(windows - mean[:, None]).mean(axis=1)
    with np.errstate(divide="ignore", invalid="ignore"):
        values = (typical[period - 1 :] - mean) / (0.015 * mean_dev)
    result[period - 1 :] = np.where(mean_dev == 0, 0.0, values)
    return result


def mfi(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    volumes: np.ndarray,
    period: int = 14,
) -> np.ndarray:
    """
    Money Flow Index over the trailing `period` typical-price changes.

    No negative flow in the window reads as exactly 100; otherwise no
    positive flow reads as exactly 0.
    """
    n = len(closes)
    result = _undefined(n)
    if n < period + 1:
        return result

    typical = _typical_price(highs, lows, closes)
    money_flow = typical * volumes
    change = np.diff(typical)

    positive = np.zeros(n)
    negative = np.zeros(n)
    positive[1:] = np.where(change > 0, money_flow[1:], 0.0)
    negative[1:] = np.where(change < 0, money_flow[1:], 0.0)

    pos_sum = _rolling(positive, period, np.sum)[period:]
    neg_sum = _rolling(negative, period, np.sum)[period:]

    with np.errstate(divide="ignore", invalid="ignore"):
        values = 100 - 100 / (1 + pos_sum / neg_sum)
    values = np.where(pos_sum == 0, 0.0, values)
    result[period:] = np.where(neg_sum == 0, 100.0, values)
    return result


# =============================================================================
# VOLATILITY INDICATORS
# =============================================================================


def true_range(highs: np.ndarray, lows: np.ndarray, closes: np.ndarray) -> np.ndarray:
    """True range; undefined (NaN) for the first candle."""
    tr = _undefined(len(closes))
    if len(closes) < 2:
        return tr

    prev_close = closes[:-1]
    tr[1:] = np.maximum.reduce(
        [
            highs[1:] - lows[1:],
            np.abs(highs[1:] - prev_close),
            np.abs(lows[1:] - prev_close),
        ]
    )
    return tr


def atr(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 14
) -> np.ndarray:
    """Average True Range (Wilder). Needs period + 1 candles."""
    result = _undefined(len(closes))
    if len(closes) < period + 1:
        return result

    result[1:] = rma(true_range(highs, lows, closes)[1:], period)
    return result


def bollinger_bands(
    closes: np.ndarray, period: int = 20, std_dev: float = 2.0
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Bollinger Bands (population standard deviation).

    Returns: (upper, middle, lower, bandwidth)
    """
    middle = sma(closes, period)
    deviation = _rolling(closes, period, np.std)

    upper = middle + std_dev * deviation
    lower = middle - std_dev * deviation

    with np.errstate(divide="ignore", invalid="ignore"):
        bandwidth = (upper - lower) / middle

    return upper, middle, lower, bandwidth


def bollinger_squeeze(bandwidth: np.ndarray, threshold: float) -> Optional[int]:
    """1 when the latest band width is below threshold, 0 otherwise, None if undefined."""
    width = get_last_valid(bandwidth)
    if width is None:
        return None
    return 1 if width < threshold else 0


# =============================================================================
# VOLUME INDICATORS
# =============================================================================


def vwap(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, volumes: np.ndarray
) -> np.ndarray:
    """Cumulative VWAP; typical price while no volume has traded."""
    typical = _typical_price(highs, lows, closes)
    traded = np.cumsum(volumes)
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(traded > 0, np.cumsum(typical * volumes) / traded, typical)


def obv(closes: np.ndarray, volumes: np.ndarray) -> np.ndarray:
    """On-Balance Volume, starting from zero."""
    result = np.zeros(len(closes))
    if len(closes) < 2:
        return result

    direction = np.sign(np.diff(closes))
    result[1:] = np.cumsum(direction * volumes[1:])
    return result


def obv_slope(obv_values: np.ndarray, lookback: int = 5) -> Optional[float]:
    """
    Change in OBV over the last `lookback` bars.

    Uses as much history as exists; needs at least 3 points.
    """
    if len(obv_values) < 3:
        return None
    previous = obv_values[max(0, len(obv_values) - 1 - lookback)]
    return float(obv_values[-1] - previous)


def obv_trend(obv_values: np.ndarray, lookback: int = 5) -> Optional[str]:
    """'up', 'down' or None from the recent OBV slope."""
    slope = obv_slope(obv_values, lookback)
    if slope is None or slope == 0:
        return None
    return "up" if slope > 0 else "down"


def volume_oscillator(
    volumes: np.ndarray, short_period: int = 5, long_period: int = 10
) -> np.ndarray:
    """Percent difference between short and long volume SMAs."""
    short = sma(volumes, short_period)
    long = sma(volumes, long_period)
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(long == 0, 0.0, (short - long) / long * 100)


def average_volume(
    volumes: np.ndarray, window: int = 20
) -> tuple[Optional[float], Optional[float]]:
    """
    Mean volume of the last `window` bars and of the `window` bars before.

    Returns: (current, previous); either is None without enough history.
    """
    current = float(np.mean(volumes[-window:])) if len(volumes) >= window else None
    previous = (
        float(np.mean(volumes[-2 * window : -window])) if len(volumes) >= 2 * window else None
    )
    return current, previous


# =============================================================================
# TREND INDICATORS
# =============================================================================


def adx(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 14
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Average Directional Index (Wilder). Needs 2 * period candles;
    +DI / -DI are defined from period + 1.

    Returns: (adx, plus_di, minus_di)
    """
    n = len(closes)
    if n < period + 1:
        return _undefined(n), _undefined(n), _undefined(n)

    # Directional movement from the second candle on
    up = np.diff(highs)
    down = -np.diff(lows)
    plus_dm = np.where((up > down) & (up > 0), up, 0.0)
    minus_dm = np.where((down > up) & (down > 0), down, 0.0)

    smoothed_tr = _undefined(n)
    smoothed_plus = _undefined(n)
    smoothed_minus = _undefined(n)
    smoothed_tr[1:] = rma(true_range(highs, lows, closes)[1:], period)
    smoothed_plus[1:] = rma(plus_dm, period)
    smoothed_minus[1:] = rma(minus_dm, period)

    with np.errstate(divide="ignore", invalid="ignore"):
        plus_di = np.where(smoothed_tr > 0, 100 * smoothed_plus / smoothed_tr, 0.0)
        minus_di = np.where(smoothed_tr > 0, 100 * smoothed_minus / smoothed_tr, 0.0)
    undefined = np.isnan(smoothed_tr)
    plus_di[undefined] = np.nan
    minus_di[undefined] = np.nan

    di_sum = plus_di + minus_di
    with np.errstate(divide="ignore", invalid="ignore"):
        dx = np.where(di_sum > 0, 100 * np.abs(plus_di - minus_di) / di_sum, 0.0)

    # DX is first defined at index `period`; ADX is its Wilder average
    adx_values = _undefined(n)
    adx_values[period:] = rma(dx[period:], period)

    return adx_values, plus_di, minus_di


def parabolic_sar(
    highs: np.ndarray,
    lows: np.ndarray,
    step: float = 0.02,
    max_step: float = 0.2,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Parabolic SAR.

    Returns: (sar, trend) where trend is 1 for up, -1 for down, NaN before
    the second candle.
    """
    n = len(highs)
    sar = _undefined(n)
    trend = _undefined(n)
    if n < 2:
        return sar, trend

    rising = (highs[1] + lows[1]) >= (highs[0] + lows[0])
    sar[1] = lows[0] if rising else highs[0]
    extreme = highs[1] if rising else lows[1]
    trend[1] = 1 if rising else -1
    af = step

    for i in range(2, n):
        current = sar[i - 1] + af * (extreme - sar[i - 1])

        if rising:
            current = min(current, lows[i - 1], lows[i - 2])
            if lows[i] < current:
                rising, current, extreme, af = False, extreme, lows[i], step
            elif highs[i] > extreme:
                extreme, af = highs[i], min(af + step, max_step)
        else:
            current = max(current, highs[i - 1], highs[i - 2])
            if highs[i] > current:
                rising, current, extreme, af = True, extreme, highs[i], step
            elif lows[i] < extreme:
                extreme, af = lows[i], min(af + step, max_step)

        sar[i] = current
        trend[i] = 1 if rising else -1

    return sar, trend


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_last_valid(arr: np.ndarray) -> Optional[float]:
    """Get last finite value from array."""
    finite = arr[np.isfinite(arr)] if len(arr) else arr
    return float(finite[-1]) if len(finite) else None
