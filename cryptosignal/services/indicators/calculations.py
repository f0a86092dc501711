"""
Technical Indicator Calculations

NumPy implementations of the indicators the strategy panel reads.
Every function takes closes oldest-first and returns an array aligned to
the input, NaN where the lookback is not yet filled.
"""

from typing import NamedTuple, Optional

import numpy as np


class MACDSeries(NamedTuple):
    line: np.ndarray
    signal: np.ndarray
    histogram: np.ndarray


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def sma(data: np.ndarray, period: int) -> np.ndarray:
    """Simple Moving Average."""
    out = np.full(len(data), np.nan)
    if period <= 0 or len(data) < period:
        return out

    window_sums = np.convolve(data, np.ones(period), mode="valid")
    out[period - 1 :] = window_sums / period
    return out


def ema(data: np.ndarray, period: int) -> np.ndarray:
    """Exponential Moving Average, seeded with the SMA of the first full window."""
    out = np.full(len(data), np.nan)

    # Leading NaNs are skipped so an EMA of the MACD line works
    finite = np.flatnonzero(~np.isnan(data))
    if len(finite) == 0 or len(data) - finite[0] < period:
        return out

    alpha = 2 / (period + 1)
    first = finite[0] + period - 1
    out[first] = data[finite[0] : first + 1].mean()

    for i in range(first + 1, len(data)):
        out[i] = out[i - 1] + alpha * (data[i] - out[i - 1])

    return out


# =============================================================================
# MOMENTUM INDICATORS
# =============================================================================


def rsi(closes: np.ndarray, period: int = 14) -> np.ndarray:
    """Relative Strength Index (Wilder smoothing), always within [0, 100]."""
    out = np.full(len(closes), np.nan)
    if len(closes) <= period:
        return out

    moves = np.diff(closes)
    up = np.clip(moves, 0, None)
    down = np.clip(-moves, 0, None)

    avg_up = up[:period].mean()
    avg_down = down[:period].mean()
    out[period] = _rsi_from_averages(avg_up, avg_down)

    for j in range(period, len(moves)):
        avg_up += (up[j] - avg_up) / period
        avg_down += (down[j] - avg_down) / period
        out[j + 1] = _rsi_from_averages(avg_up, avg_down)

    return out


def _rsi_from_averages(avg_up: float, avg_down: float) -> float:
    if avg_down == 0:
        # No losses: flat is neutral, pure gains are maximal
        return 100.0 if avg_up > 0 else 50.0
    return float(np.clip(100 * avg_up / (avg_up + avg_down), 0, 100))


def macd(
    closes: np.ndarray,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MACDSeries:
    """MACD line (fast EMA - slow EMA), its signal EMA, and the histogram."""
    line = ema(closes, fast_period) - ema(closes, slow_period)
    signal = ema(line, signal_period)
    return MACDSeries(line=line, signal=signal, histogram=line - signal)


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_last_valid(arr: np.ndarray) -> Optional[float]:
    """Last non-NaN value, or None."""
    finite = arr[~np.isnan(arr)]
    if len(finite) == 0:
        return None
    return float(finite[-1])
