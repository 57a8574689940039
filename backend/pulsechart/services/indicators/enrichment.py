"""
Enrichment Pipeline

Zips every enabled indicator's full series onto the candle array to produce
render-ready EnrichedCandle records.

Recomputation is always total: EMA, RSI and MACD depend on the whole prefix,
so there is no incremental patching. Same inputs give identical output.
"""

import logging
from typing import Callable, Optional, Sequence

from pulsechart.schemas.market import Candle
from pulsechart.schemas.indicators import EnrichedCandle, Indicator
from pulsechart.services.indicators.calculations import (
    Series,
    sma,
    ema,
    bollinger_bands,
    rsi,
    macd,
    vwap,
)

logger = logging.getLogger(__name__)

Calculator = Callable[[Indicator, Sequence[Candle], list[float]], dict[str, Series]]

_CANDLE_FIELDS = set(Candle.model_fields)


def _param(indicator: Indicator, name: str, default: float) -> float:
    return indicator.params.get(name, default)


def _moving_average(fn) -> Calculator:
    def calculate(indicator: Indicator, candles, closes) -> dict[str, Series]:
        return {indicator.id: fn(closes, int(_param(indicator, "period", 20)))}

    return calculate


def _bollinger(indicator: Indicator, candles, closes) -> dict[str, Series]:
    bands = bollinger_bands(
        closes,
        int(_param(indicator, "period", 20)),
        _param(indicator, "stdDev", 2.0),
    )
    return {"bb_upper": bands.upper, "bb_middle": bands.middle, "bb_lower": bands.lower}


def _vwap(indicator: Indicator, candles, closes) -> dict[str, Series]:
    return {"vwap": vwap(candles)}


def _rsi(indicator: Indicator, candles, closes) -> dict[str, Series]:
    return {"rsi": rsi(closes, int(_param(indicator, "period", 14)))}


def _macd(indicator: Indicator, candles, closes) -> dict[str, Series]:
    result = macd(
        closes,
        int(_param(indicator, "fast", 12)),
        int(_param(indicator, "slow", 26)),
        int(_param(indicator, "signal", 9)),
    )
    return {
        "macd": result.macd,
        "macd_signal": result.signal,
        "macd_histogram": result.histogram,
    }


# indicator id -> EnrichedCandle field(s) it fills
CALCULATORS: dict[str, Calculator] = {
    "sma20": _moving_average(sma),
    "sma50": _moving_average(sma),
    "ema12": _moving_average(ema),
    "ema26": _moving_average(ema),
    "bb": _bollinger,
    "vwap": _vwap,
    "rsi": _rsi,
    "macd": _macd,
}


def enrich(candles: Sequence[Candle], indicators: Sequence[Indicator]) -> list[EnrichedCandle]:
    """Build one EnrichedCandle per candle with every enabled indicator's value."""
    if not candles:
        return []

    closes = [c.close for c in candles]
    columns: dict[str, Series] = {}

    for indicator in indicators:
        if not indicator.enabled:
            continue
        calculate = CALCULATORS.get(indicator.id)
        if calculate is None:
            logger.warning(f"No calculator for indicator '{indicator.id}', skipping")
            continue
        columns.update(calculate(indicator, candles, closes))

    enriched = []
    for i, candle in enumerate(candles):
        enriched.append(
            EnrichedCandle(
                **candle.model_dump(include=_CANDLE_FIELDS),
                is_up=candle.close >= candle.open,
                body=(min(candle.open, candle.close), max(candle.open, candle.close)),
                **{field: series[i] for field, series in columns.items()},
            )
        )

    return enriched


def _signature(indicators: Sequence[Indicator]) -> tuple:
    return tuple(
        (i.id, tuple(sorted(i.params.items()))) for i in indicators if i.enabled
    )


class EnrichmentPipeline:
    """
    Memoizing wrapper around ``enrich``.

    The memo key is the identity of the candle sequence plus the enabled
    indicators and their parameters. A hit returns the previously built
    list, which callers must treat as read-only.
    """

    def __init__(self):
        self._candles: Optional[Sequence[Candle]] = None
        self._signature: Optional[tuple] = None
        self._result: list[EnrichedCandle] = []
        self.hits = 0
        self.misses = 0

    def run(
        self, candles: Sequence[Candle], indicators: Sequence[Indicator]
    ) -> list[EnrichedCandle]:
        signature = _signature(indicators)
        if candles is self._candles and signature == self._signature:
            self.hits += 1
            return self._result

        self.misses += 1
        self._result = enrich(candles, indicators)
        self._candles = candles
        self._signature = signature
        return self._result

    def clear(self) -> None:
        self._candles = None
        self._signature = None
        self._result = []
