from pulsechart.schemas.market import Timeframe
from pulsechart.services.cache.candle_cache import CandleCache, candle_cache_key

from factories import make_candles


def test_cache_key() -> None:
    assert candle_cache_key("aapl", Timeframe.D1) == "AAPL::1D"
    assert candle_cache_key("MSFT", "4H") == "MSFT::4H"


def test_set_and_get(clock) -> None:
    cache = CandleCache(ttl_seconds=60, clock=clock)
    candles = make_candles([1.0, 2.0])

    entry = cache.set("AAPL::1D", candles)

    assert cache.get("AAPL::1D") is entry
    assert entry.candles == tuple(candles)
    assert entry.fetched_at_ms == int(clock.now * 1000)
    assert "AAPL::1D" in cache
    assert cache.get("AAPL::1W") is None


def test_freshness_window(clock) -> None:
    cache = CandleCache(ttl_seconds=60, clock=clock)
    cache.set("AAPL::1D", make_candles([1.0]))

    assert cache.is_fresh("AAPL::1D")
    clock.advance(59)
    assert cache.is_fresh("AAPL::1D")
    clock.advance(1)
    assert not cache.is_fresh("AAPL::1D")
    # stale entries stay readable
    assert cache.get("AAPL::1D") is not None
    assert cache.age_seconds("AAPL::1D") == 60.0


def test_missing_key_is_not_fresh(clock) -> None:
    cache = CandleCache(ttl_seconds=60, clock=clock)
    assert not cache.is_fresh("NOPE::1D")
    assert cache.age_seconds("NOPE::1D") is None


def test_overwrite_restamps(clock) -> None:
    cache = CandleCache(ttl_seconds=60, clock=clock)
    cache.set("AAPL::1D", make_candles([1.0]))
    clock.advance(120)
    cache.set("AAPL::1D", make_candles([2.0]))
    assert cache.is_fresh("AAPL::1D")
    assert cache.get("AAPL::1D").candles[0].close == 2.0


def test_invalidate_symbol(clock) -> None:
    cache = CandleCache(ttl_seconds=60, clock=clock)
    for key in ("AAPL::1D", "AAPL::1W", "AAPLX::1D", "MSFT::1D"):
        cache.set(key, make_candles([1.0]))

    assert cache.invalidate_symbol("aapl") == 2
    assert sorted(cache) == ["AAPLX::1D", "MSFT::1D"]


def test_caches_are_independent(clock) -> None:
    first = CandleCache(ttl_seconds=60, clock=clock)
    second = CandleCache(ttl_seconds=60, clock=clock)
    first.set("AAPL::1D", make_candles([1.0]))
    assert len(second) == 0
