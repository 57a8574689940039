"""
Technical Snapshot

Reduces a daily candle series to the latest indicator readings shown in the
analysis panel: moving averages, RSI, MACD direction and volume context.
"""

from typing import Sequence

from pulsechart.schemas.market import Candle
from pulsechart.schemas.indicators import (
    TechnicalSnapshot,
    MACDSignal,
    HistogramTrend,
    DataQuality,
)
from pulsechart.services.indicators.calculations import (
    sma,
    rsi,
    macd,
    last_valid,
    last_n_valid,
)

MIN_CANDLES = 20
PARTIAL_CANDLES = 50
FULL_CANDLES = 200
MACD_MIN_CANDLES = 35  # slow EMA (26) + signal (9)
HISTOGRAM_FLAT_THRESHOLD = 0.01


def _data_quality(count: int) -> DataQuality:
    if count >= FULL_CANDLES:
        return DataQuality.FULL
    if count >= PARTIAL_CANDLES:
        return DataQuality.PARTIAL
    return DataQuality.INSUFFICIENT


def _average_volume(candles: Sequence[Candle], period: int = 20) -> float:
    recent = candles[-period:]
    return sum(c.volume for c in recent) / len(recent)


def _macd_reading(closes: list[float]) -> tuple[MACDSignal, HistogramTrend]:
    result = macd(closes)
    last_macd = last_valid(result.macd)
    last_signal = last_valid(result.signal)
    histogram = last_n_valid(result.histogram, 3)

    if last_macd is None or last_signal is None:
        return MACDSignal.NEUTRAL, HistogramTrend.FLAT

    trend = HistogramTrend.FLAT
    if len(histogram) >= 2:
        diff = histogram[-1] - histogram[-2]
        if abs(diff) < HISTOGRAM_FLAT_THRESHOLD:
            trend = HistogramTrend.FLAT
        elif diff > 0:
            trend = HistogramTrend.INCREASING
        else:
            trend = HistogramTrend.DECREASING

    above_signal = last_macd > last_signal
    histogram_positive = bool(histogram) and histogram[-1] > 0

    signal = MACDSignal.NEUTRAL
    if above_signal and (histogram_positive or trend == HistogramTrend.INCREASING):
        signal = MACDSignal.BULLISH
    elif not above_signal and (not histogram_positive or trend == HistogramTrend.DECREASING):
        signal = MACDSignal.BEARISH

    # A zero-line cross of the histogram wins over the above
    if len(histogram) >= 2:
        previous, current = histogram[-2], histogram[-1]
        if previous < 0 < current:
            signal = MACDSignal.BULLISH
        if previous > 0 > current:
            signal = MACDSignal.BEARISH

    return signal, trend


def technical_snapshot(candles: Sequence[Candle]) -> TechnicalSnapshot:
    """Latest-value summary; fewer than 20 candles only reports quality."""
    if len(candles) < MIN_CANDLES:
        return TechnicalSnapshot(data_quality=DataQuality.INSUFFICIENT)

    ordered = sorted(candles, key=lambda c: c.timestamp)
    closes = [c.close for c in ordered]
    count = len(ordered)

    ma50 = last_valid(sma(closes, 50)) if count >= PARTIAL_CANDLES else None
    ma200 = last_valid(sma(closes, 200)) if count >= FULL_CANDLES else None

    if count >= MACD_MIN_CANDLES:
        macd_signal, histogram_trend = _macd_reading(closes)
    else:
        macd_signal, histogram_trend = MACDSignal.NEUTRAL, HistogramTrend.FLAT

    price_change = None
    if closes[-2] != 0:
        price_change = (closes[-1] - closes[-2]) / closes[-2] * 100

    return TechnicalSnapshot(
        price=closes[-1],
        ma20=last_valid(sma(closes, 20)),
        ma50=ma50,
        ma200=ma200,
        rsi=last_valid(rsi(closes, 14)),
        macd_signal=macd_signal,
        macd_histogram_trend=histogram_trend,
        volume=ordered[-1].volume,
        avg_volume=_average_volume(ordered),
        price_change=price_change,
        data_quality=_data_quality(count),
    )
