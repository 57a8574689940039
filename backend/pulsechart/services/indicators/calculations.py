"""
Technical Indicator Calculations

Pure Python/NumPy implementations of the chart indicators.
All math is deterministic.

Every function returns a list of the same length as its input, with None for
the warm-up prefix where the window is not yet full. Callers zip the result
against the candle array by index. Too-short inputs and non-positive periods
degrade to all-None output instead of raising.
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

import numpy as np

Series = list[Optional[float]]


class PriceBar(Protocol):
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class BollingerSeries:
    """Bollinger band arrays, index-aligned with the input."""

    upper: Series
    middle: Series
    lower: Series


@dataclass(frozen=True)
class MACDSeries:
    """MACD arrays, index-aligned with the input."""

    macd: Series
    signal: Series
    histogram: Series


def _as_array(data: Sequence[float]) -> np.ndarray:
    return np.asarray(data, dtype=float).reshape(-1)


def _to_series(values: np.ndarray) -> Series:
    """NaN becomes None, everything else a plain float."""
    return [None if np.isnan(v) else float(v) for v in values]


def _sma_array(values: np.ndarray, period: int) -> np.ndarray:
    result = np.full(len(values), np.nan)
    if period <= 0 or len(values) < period:
        return result

    for i in range(period - 1, len(values)):
        result[i] = np.mean(values[i - period + 1 : i + 1])
    return result


def _ema_array(values: np.ndarray, period: int) -> np.ndarray:
    result = np.full(len(values), np.nan)
    if period <= 0 or len(values) < period:
        return result

    multiplier = 2 / (period + 1)

    # Seed with the SMA of the first window
    result[period - 1] = np.mean(values[:period])

    for i in range(period, len(values)):
        result[i] = (values[i] - result[i - 1]) * multiplier + result[i - 1]

    return result


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def sma(data: Sequence[float], period: int) -> Series:
    """Simple Moving Average."""
    return _to_series(_sma_array(_as_array(data), period))


def ema(data: Sequence[float], period: int) -> Series:
    """Exponential Moving Average, seeded with the SMA of the first window."""
    return _to_series(_ema_array(_as_array(data), period))


# =============================================================================
# VOLATILITY
# =============================================================================


def bollinger_bands(
    data: Sequence[float], period: int = 20, std_dev: float = 2.0
) -> BollingerSeries:
    """
    Bollinger Bands.

    Middle band is the SMA; upper/lower are offset by ``std_dev`` population
    standard deviations of the trailing window.
    """
    values = _as_array(data)
    middle = _sma_array(values, period)

    std = np.full(len(values), np.nan)
    if period > 0:
        for i in range(period - 1, len(values)):
            std[i] = np.std(values[i - period + 1 : i + 1])

    upper = middle + (std_dev * std)
    lower = middle - (std_dev * std)

    return BollingerSeries(
        upper=_to_series(upper),
        middle=_to_series(middle),
        lower=_to_series(lower),
    )


# =============================================================================
# MOMENTUM
# =============================================================================


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def rsi(data: Sequence[float], period: int = 14) -> Series:
    """
    Relative Strength Index with Wilder's smoothing.

    The first ``period`` values are None. The seed averages are the plain
    means of the first ``period`` gains/losses; after that each step carries
    the previous smoothed average forward:
    ``avg = (avg * (period - 1) + current) / period``.
    """
    closes = _as_array(data)
    result = np.full(len(closes), np.nan)
    if period <= 0 or len(closes) < period + 1:
        return _to_series(result)

    deltas = np.diff(closes)
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = float(np.mean(gains[:period]))
    avg_loss = float(np.mean(losses[:period]))
    result[period] = _rsi_value(avg_gain, avg_loss)

    for i in range(period, len(deltas)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        result[i + 1] = _rsi_value(avg_gain, avg_loss)

    return _to_series(result)


def macd(
    data: Sequence[float],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MACDSeries:
    """
    MACD (Moving Average Convergence Divergence).

    The signal line is an EMA over the defined part of the MACD line only,
    mapped back onto the original indices.
    """
    closes = _as_array(data)
    macd_line = _ema_array(closes, fast_period) - _ema_array(closes, slow_period)

    defined = ~np.isnan(macd_line)
    signal_line = np.full(len(closes), np.nan)
    signal_line[defined] = _ema_array(macd_line[defined], signal_period)

    histogram = macd_line - signal_line

    return MACDSeries(
        macd=_to_series(macd_line),
        signal=_to_series(signal_line),
        histogram=_to_series(histogram),
    )


# =============================================================================
# VOLUME
# =============================================================================


def vwap(candles: Sequence[PriceBar]) -> Series:
    """
    Volume Weighted Average Price, cumulative from the first candle.

    None wherever the cumulative volume is still zero.
    """
    if not candles:
        return []

    highs = np.array([c.high for c in candles], dtype=float)
    lows = np.array([c.low for c in candles], dtype=float)
    closes = np.array([c.close for c in candles], dtype=float)
    volumes = np.array([c.volume for c in candles], dtype=float)

    typical_price = (highs + lows + closes) / 3
    cumulative_tpv = np.cumsum(typical_price * volumes)
    cumulative_volume = np.cumsum(volumes)

    with np.errstate(divide="ignore", invalid="ignore"):
        result = cumulative_tpv / cumulative_volume
    result[cumulative_volume == 0] = np.nan

    return _to_series(result)


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def last_valid(series: Sequence[Optional[float]]) -> Optional[float]:
    """Get the last non-None value from a series."""
    for value in reversed(series):
        if value is not None:
            return value
    return None


def last_n_valid(series: Sequence[Optional[float]], n: int) -> list[float]:
    """Get up to the last ``n`` non-None values, oldest first."""
    values = [v for v in series if v is not None]
    return values[-n:] if n > 0 else []
