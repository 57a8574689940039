import random

import pytest

from pulsechart.services.indicators.calculations import bollinger_bands, rsi, sma
from pulsechart.services.indicators.enrichment import EnrichmentPipeline, enrich
from pulsechart.services.indicators.registry import IndicatorSet, default_indicators, set_enabled

from factories import make_candle, make_candles


def _series(n: int = 60) -> list:
    rng = random.Random(11)
    candles = []
    price = 50.0
    for i in range(n):
        close = max(1.0, price + rng.uniform(-1.5, 1.5))
        candles.append(make_candle(close, i, open_=price, volume=rng.randint(100, 1000)))
        price = close
    return candles


def _all_enabled():
    indicators = default_indicators()
    for indicator in list(indicators):
        indicators = set_enabled(indicators, indicator.id, True)
    return indicators


def test_empty_input() -> None:
    assert enrich([], default_indicators()) == []


def test_geometry_fields() -> None:
    up = make_candle(12.0, 0, open_=10.0)
    down = make_candle(9.0, 1, open_=11.0)
    enriched = enrich([up, down], default_indicators())

    assert enriched[0].is_up is True
    assert enriched[0].body == (10.0, 12.0)
    assert enriched[1].is_up is False
    assert enriched[1].body == (9.0, 11.0)
    assert enriched[0].timestamp == up.timestamp


def test_doji_counts_as_up() -> None:
    enriched = enrich([make_candle(10.0, 0, open_=10.0)], default_indicators())
    assert enriched[0].is_up is True


def test_values_are_index_aligned() -> None:
    candles = _series()
    enriched = enrich(candles, _all_enabled())
    closes = [c.close for c in candles]

    expected_sma = sma(closes, 20)
    expected_rsi = rsi(closes, 14)
    expected_bb = bollinger_bands(closes, 20, 2)

    assert len(enriched) == len(candles)
    for i, record in enumerate(enriched):
        assert record.sma20 == expected_sma[i]
        assert record.rsi == expected_rsi[i]
        assert record.bb_upper == expected_bb.upper[i]
        assert record.bb_lower == expected_bb.lower[i]

    assert enriched[18].sma20 is None
    assert enriched[19].sma20 is not None
    assert enriched[-1].macd_histogram == pytest.approx(
        enriched[-1].macd - enriched[-1].macd_signal
    )


def test_disabled_indicators_stay_none() -> None:
    enriched = enrich(_series(), default_indicators())
    last = enriched[-1]
    assert last.sma20 is not None
    for field in ("sma50", "ema12", "ema26", "bb_upper", "vwap", "rsi", "macd"):
        assert getattr(last, field) is None


def test_custom_params_are_used() -> None:
    candles = _series()
    indicators = [
        i.model_copy(update={"params": {"period": 5}}) if i.id == "sma20" else i
        for i in default_indicators()
    ]
    enriched = enrich(candles, indicators)
    assert enriched[4].sma20 == pytest.approx(sum(c.close for c in candles[:5]) / 5)


def test_toggle_off_and_on_is_identical() -> None:
    candles = _series()
    indicators = IndicatorSet()
    indicators.toggle("rsi")
    before = [c.model_dump_json() for c in enrich(candles, indicators.items)]

    indicators.toggle("rsi")
    indicators.toggle("rsi")
    after = [c.model_dump_json() for c in enrich(candles, indicators.items)]

    assert before == after


def test_serializes_camel_case() -> None:
    enriched = enrich(_series(), _all_enabled())
    payload = enriched[-1].model_dump(by_alias=True)
    assert {"isUp", "bbUpper", "macdSignal", "macdHistogram"} <= payload.keys()


def test_pipeline_memoizes_on_identity() -> None:
    pipeline = EnrichmentPipeline()
    candles = tuple(_series())
    indicators = IndicatorSet()

    first = pipeline.run(candles, indicators.items)
    second = pipeline.run(candles, indicators.items)
    assert second is first
    assert (pipeline.hits, pipeline.misses) == (1, 1)

    # equal contents, different object
    pipeline.run(tuple(list(candles)), indicators.items)
    assert pipeline.misses == 2


def test_pipeline_recomputes_on_toggle() -> None:
    pipeline = EnrichmentPipeline()
    candles = tuple(_series())
    indicators = IndicatorSet()

    first = pipeline.run(candles, indicators.items)
    indicators.toggle("vwap")
    second = pipeline.run(candles, indicators.items)

    assert second is not first
    assert first[-1].vwap is None
    assert second[-1].vwap is not None

    pipeline.clear()
    pipeline.run(candles, indicators.items)
    assert pipeline.misses == 3
