import pytest

from pulsechart.schemas.indicators import IndicatorCategory
from pulsechart.services.indicators.registry import (
    DEFAULT_INDICATORS,
    INDICATOR_IDS,
    IndicatorSet,
    UnknownIndicatorError,
    default_indicators,
    enabled_ids,
    set_enabled,
    toggle,
)


def test_default_catalog() -> None:
    ids = [i.id for i in DEFAULT_INDICATORS]
    assert ids == ["sma20", "sma50", "ema12", "ema26", "bb", "vwap", "rsi", "macd"]
    assert INDICATOR_IDS == frozenset(ids)
    assert enabled_ids(DEFAULT_INDICATORS) == {"sma20"}


def test_categories() -> None:
    oscillators = {i.id for i in DEFAULT_INDICATORS if i.category == IndicatorCategory.OSCILLATOR}
    assert oscillators == {"rsi", "macd"}


def test_default_params() -> None:
    by_id = {i.id: i for i in DEFAULT_INDICATORS}
    assert by_id["bb"].params == {"period": 20, "stdDev": 2}
    assert by_id["macd"].params == {"fast": 12, "slow": 26, "signal": 9}
    assert by_id["vwap"].params == {}


def test_toggle_returns_new_collection() -> None:
    original = default_indicators()
    updated = toggle(original, "rsi")

    assert enabled_ids(updated) == {"sma20", "rsi"}
    assert enabled_ids(original) == {"sma20"}
    assert [i.id for i in updated] == [i.id for i in original]


def test_toggle_twice_restores_state() -> None:
    original = default_indicators()
    assert toggle(toggle(original, "macd"), "macd") == original


def test_set_enabled_is_idempotent() -> None:
    once = set_enabled(default_indicators(), "sma20", True)
    assert once == default_indicators()


def test_unknown_indicator() -> None:
    with pytest.raises(UnknownIndicatorError):
        toggle(default_indicators(), "stochastic")


def test_indicator_set() -> None:
    indicators = IndicatorSet()
    before = indicators.items

    toggled = indicators.toggle("bb")
    assert toggled.enabled is True
    assert indicators.enabled_ids == {"sma20", "bb"}
    # earlier snapshot is untouched
    assert enabled_ids(before) == {"sma20"}

    assert [i.id for i in indicators.oscillators()] == ["rsi", "macd"]
    assert len(indicators.overlays()) == 6
    assert len(indicators) == 8

    indicators.set_enabled("sma20", False)
    assert indicators.enabled_ids == {"bb"}


def test_indicator_serializes_camel_case() -> None:
    payload = DEFAULT_INDICATORS[0].model_dump(by_alias=True)
    assert payload["displayName"] == "Simple Moving Average (20)"
    assert payload["shortName"] == "SMA 20"
