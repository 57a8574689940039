"""
Indicator Registry

Static catalog of the chart indicators: what exists, how it is drawn and its
default parameters. Nothing here computes values.
"""

from typing import Iterable, Optional, Sequence

from pulsechart.schemas.indicators import Indicator, IndicatorCategory


class IndicatorError(Exception):
    """Base exception for registry misuse."""
    pass


class UnknownIndicatorError(IndicatorError):
    def __init__(self, indicator_id: str):
        self.indicator_id = indicator_id
        super().__init__(f"Unknown indicator: {indicator_id}")


DEFAULT_INDICATORS: tuple[Indicator, ...] = (
    Indicator(
        id="sma20",
        display_name="Simple Moving Average (20)",
        short_name="SMA 20",
        category=IndicatorCategory.OVERLAY,
        enabled=True,
        color="hsl(217, 91%, 60%)",
        params={"period": 20},
    ),
    Indicator(
        id="sma50",
        display_name="Simple Moving Average (50)",
        short_name="SMA 50",
        category=IndicatorCategory.OVERLAY,
        color="hsl(38, 92%, 50%)",
        params={"period": 50},
    ),
    Indicator(
        id="ema12",
        display_name="Exponential Moving Average (12)",
        short_name="EMA 12",
        category=IndicatorCategory.OVERLAY,
        color="hsl(262, 83%, 58%)",
        params={"period": 12},
    ),
    Indicator(
        id="ema26",
        display_name="Exponential Moving Average (26)",
        short_name="EMA 26",
        category=IndicatorCategory.OVERLAY,
        color="hsl(160, 84%, 45%)",
        params={"period": 26},
    ),
    Indicator(
        id="bb",
        display_name="Bollinger Bands",
        short_name="BB",
        category=IndicatorCategory.OVERLAY,
        color="hsl(180, 100%, 50%)",
        params={"period": 20, "stdDev": 2},
    ),
    Indicator(
        id="vwap",
        display_name="Volume Weighted Avg Price",
        short_name="VWAP",
        category=IndicatorCategory.OVERLAY,
        color="hsl(45, 93%, 47%)",
    ),
    Indicator(
        id="rsi",
        display_name="Relative Strength Index",
        short_name="RSI",
        category=IndicatorCategory.OSCILLATOR,
        color="hsl(262, 83%, 58%)",
        params={"period": 14},
    ),
    Indicator(
        id="macd",
        display_name="MACD",
        short_name="MACD",
        category=IndicatorCategory.OSCILLATOR,
        color="hsl(217, 91%, 60%)",
        params={"fast": 12, "slow": 26, "signal": 9},
    ),
)

INDICATOR_IDS: frozenset[str] = frozenset(i.id for i in DEFAULT_INDICATORS)


def default_indicators() -> list[Indicator]:
    """Fresh indicator collection in registry order with default flags."""
    return list(DEFAULT_INDICATORS)


def find_indicator(indicators: Iterable[Indicator], indicator_id: str) -> Optional[Indicator]:
    for indicator in indicators:
        if indicator.id == indicator_id:
            return indicator
    return None


def set_enabled(
    indicators: Sequence[Indicator], indicator_id: str, enabled: bool
) -> list[Indicator]:
    """Return a new collection with one indicator's flag set."""
    if find_indicator(indicators, indicator_id) is None:
        raise UnknownIndicatorError(indicator_id)

    return [
        i.model_copy(update={"enabled": enabled}) if i.id == indicator_id else i
        for i in indicators
    ]


def toggle(indicators: Sequence[Indicator], indicator_id: str) -> list[Indicator]:
    """Return a new collection with one indicator's flag flipped."""
    current = find_indicator(indicators, indicator_id)
    if current is None:
        raise UnknownIndicatorError(indicator_id)
    return set_enabled(indicators, indicator_id, not current.enabled)


def enabled_ids(indicators: Iterable[Indicator]) -> frozenset[str]:
    return frozenset(i.id for i in indicators if i.enabled)


class IndicatorSet:
    """
    Indicator collection owned by one chart.

    Only explicit user toggles change it; each change swaps in a new list so
    earlier snapshots handed to the enrichment pipeline stay untouched.
    """

    def __init__(self, indicators: Optional[Sequence[Indicator]] = None):
        self._items: list[Indicator] = list(indicators) if indicators is not None else default_indicators()

    @property
    def items(self) -> list[Indicator]:
        return self._items

    @property
    def enabled_ids(self) -> frozenset[str]:
        return enabled_ids(self._items)

    def toggle(self, indicator_id: str) -> Indicator:
        self._items = toggle(self._items, indicator_id)
        return find_indicator(self._items, indicator_id)

    def set_enabled(self, indicator_id: str, enabled: bool) -> Indicator:
        self._items = set_enabled(self._items, indicator_id, enabled)
        return find_indicator(self._items, indicator_id)

    def overlays(self) -> list[Indicator]:
        return [i for i in self._items if i.category == IndicatorCategory.OVERLAY]

    def oscillators(self) -> list[Indicator]:
        return [i for i in self._items if i.category == IndicatorCategory.OSCILLATOR]

    def __iter__(self):
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)
