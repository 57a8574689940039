import pytest

from pulsechart.schemas.indicators import DataQuality, HistogramTrend, MACDSignal
from pulsechart.schemas.market import INDICATOR_TIMEFRAME_CONFIG
from pulsechart.services.base import ValidationError
from pulsechart.services.indicators.service import TechnicalSnapshotService
from pulsechart.services.indicators.snapshot import technical_snapshot

from factories import StaticFetcher, make_candles


def test_too_few_candles() -> None:
    snapshot = technical_snapshot(make_candles([100.0] * 19))
    assert snapshot.data_quality == DataQuality.INSUFFICIENT
    assert snapshot.price is None
    assert snapshot.ma20 is None


def test_short_history_skips_long_averages() -> None:
    closes = [100.0 + i for i in range(30)]
    snapshot = technical_snapshot(make_candles(closes))

    assert snapshot.data_quality == DataQuality.INSUFFICIENT
    assert snapshot.price == 129.0
    assert snapshot.ma20 == pytest.approx(sum(closes[-20:]) / 20)
    assert snapshot.ma50 is None
    assert snapshot.ma200 is None
    # not enough history for a MACD reading
    assert snapshot.macd_signal == MACDSignal.NEUTRAL
    assert snapshot.macd_histogram_trend == HistogramTrend.FLAT


def test_quality_tiers() -> None:
    partial = technical_snapshot(make_candles([100.0] * 60))
    assert partial.data_quality == DataQuality.PARTIAL
    assert partial.ma50 == pytest.approx(100.0)
    assert partial.ma200 is None

    full = technical_snapshot(make_candles([100.0] * 250))
    assert full.data_quality == DataQuality.FULL
    assert full.ma200 == pytest.approx(100.0)


def test_price_change_and_volume() -> None:
    closes = [100.0] * 24 + [102.0]
    candles = make_candles(closes, volume=500.0)
    snapshot = technical_snapshot(candles)

    assert snapshot.price_change == pytest.approx(2.0)
    assert snapshot.volume == 500.0
    assert snapshot.avg_volume == pytest.approx(500.0)


def test_input_order_does_not_matter() -> None:
    candles = make_candles([100.0 + i for i in range(40)])
    assert technical_snapshot(list(reversed(candles))) == technical_snapshot(candles)


def test_rsi_in_range() -> None:
    snapshot = technical_snapshot(make_candles([100.0 + (i % 5) for i in range(60)]))
    assert 0 <= snapshot.rsi <= 100


def test_accelerating_rally_is_bullish() -> None:
    closes = [100.0 + 0.05 * i * i for i in range(60)]
    snapshot = technical_snapshot(make_candles(closes))
    assert snapshot.macd_signal == MACDSignal.BULLISH
    assert snapshot.rsi == 100.0


def test_accelerating_selloff_is_bearish() -> None:
    closes = [300.0 - 0.05 * i * i for i in range(60)]
    snapshot = technical_snapshot(make_candles(closes))
    assert snapshot.macd_signal == MACDSignal.BEARISH
    assert snapshot.rsi == pytest.approx(0.0)


# =============================================================================
# SERVICE
# =============================================================================


@pytest.mark.asyncio
async def test_service_fetches_a_year_of_dailies() -> None:
    fetcher = StaticFetcher(make_candles([100.0 + i for i in range(60)]))
    service = TechnicalSnapshotService(fetcher)

    snapshot = await service.execute(" msft ")
    await service.execute("MSFT")

    assert snapshot.data_quality == DataQuality.PARTIAL
    assert fetcher.calls == [("MSFT", INDICATOR_TIMEFRAME_CONFIG)]


@pytest.mark.asyncio
async def test_service_rejects_blank_symbol() -> None:
    service = TechnicalSnapshotService(StaticFetcher([]))
    with pytest.raises(ValidationError):
        await service.execute("  ")


@pytest.mark.asyncio
async def test_service_cache_is_bounded_by_symbol_count() -> None:
    fetcher = StaticFetcher(make_candles([100.0 + i for i in range(60)]))
    service = TechnicalSnapshotService(fetcher, max_symbols=2)

    await service.execute("AAPL")
    await service.execute("MSFT")
    await service.execute("AAPL")
    await service.execute("NVDA")

    assert len(service._cache) == 2
    assert "MSFT::indicators" not in service._cache

    await service.execute("AAPL")
    await service.execute("MSFT")
    assert [symbol for symbol, _ in fetcher.calls] == ["AAPL", "MSFT", "NVDA", "MSFT"]
