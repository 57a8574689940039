import pytest

from pulsechart.services.base import ValidationError
from pulsechart.services.data_ingestion.mock_data import generate_mock_candles
from pulsechart.services.data_ingestion.normalize import (
    aggregate_candles,
    bucket_start,
    format_candle_date,
    normalize_candles,
)

from factories import BASE_TS, DAY_MS, make_candle

HOUR_MS = 3_600_000


def _row(timestamp: int, open_: float, high: float, low: float, close: float, volume: float = 10):
    return {
        "timestamp": timestamp,
        "open": open_,
        "high": high,
        "low": low,
        "close": close,
        "volume": volume,
    }


# =============================================================================
# NORMALIZATION
# =============================================================================


def test_normalize_valid_rows() -> None:
    rows = [_row(BASE_TS, 10, 12, 9, 11), dict(_row(BASE_TS + DAY_MS, 11, 13, 10, 12), date="Jan 2")]
    candles = normalize_candles(rows, "D", "Test")

    assert [c.close for c in candles] == [11.0, 12.0]
    assert candles[0].date == "Jan 1"
    assert candles[1].date == "Jan 2"


def test_normalize_drops_malformed_rows() -> None:
    rows = [
        _row(BASE_TS, 10, 12, 9, 11),
        _row(BASE_TS + DAY_MS, 10, 9, 8, 11),  # close above high
        {"timestamp": BASE_TS, "open": 1},  # missing fields
        _row(BASE_TS + 2 * DAY_MS, 10, 12, 9, 11, volume=-5),
        "garbage",
    ]
    candles = normalize_candles(rows, "D", "Test")
    assert len(candles) == 1


def test_normalize_missing_volume_defaults_to_zero() -> None:
    row = _row(BASE_TS, 10, 12, 9, 11)
    del row["volume"]
    assert normalize_candles([row], "D", "Test")[0].volume == 0.0


def test_normalize_all_rows_bad_raises() -> None:
    with pytest.raises(ValidationError):
        normalize_candles([_row(BASE_TS, 10, 9, 8, 11)], "D", "Test")


def test_normalize_empty_payload() -> None:
    assert normalize_candles([], "D", "Test") == []


def test_date_labels() -> None:
    # 2024-01-01T00:00:00Z
    assert format_candle_date(BASE_TS, "60") == "00:00"
    assert format_candle_date(BASE_TS, "240") == "Jan 1 00:00"
    assert format_candle_date(BASE_TS, "D") == "Jan 1"
    assert format_candle_date(BASE_TS, "W") == "Jan 1"
    assert format_candle_date(BASE_TS, "M") == "Jan 24"


# =============================================================================
# AGGREGATION
# =============================================================================


def test_bucket_start() -> None:
    assert bucket_start(BASE_TS + 5 * HOUR_MS, "240") == BASE_TS + 4 * HOUR_MS
    # 2024-01-03 is a Wednesday; its week starts Monday 2024-01-01
    assert bucket_start(BASE_TS + 2 * DAY_MS + HOUR_MS, "W") == BASE_TS
    assert bucket_start(BASE_TS + 20 * DAY_MS, "M") == BASE_TS
    assert bucket_start(BASE_TS + 7, "D") == BASE_TS + 7


def test_aggregate_four_hour() -> None:
    hourly = [
        make_candle(100.0 + i, i, open_=99.0 + i, volume=10, step_ms=HOUR_MS)
        for i in range(8)
    ]
    bars = aggregate_candles(list(reversed(hourly)), "240")

    assert [b.timestamp for b in bars] == [BASE_TS, BASE_TS + 4 * HOUR_MS]
    first = bars[0]
    assert first.open == hourly[0].open
    assert first.close == hourly[3].close
    assert first.high == max(c.high for c in hourly[:4])
    assert first.low == min(c.low for c in hourly[:4])
    assert first.volume == 40


def test_aggregate_weekly() -> None:
    daily = [make_candle(50.0, i) for i in range(10)]
    bars = aggregate_candles(daily, "W")
    assert [b.timestamp for b in bars] == [BASE_TS, BASE_TS + 7 * DAY_MS]
    assert [b.volume for b in bars] == [7_000.0, 3_000.0]


def test_aggregate_monthly() -> None:
    daily = [make_candle(50.0 + i, i + 29) for i in range(3)]  # Jan 30, Jan 31, Feb 1
    bars = aggregate_candles(daily, "M")
    assert len(bars) == 2
    assert bars[0].close == 51.0
    assert bars[1].open == 52.0
    assert bars[1].date == "Feb 24"


def test_aggregate_passthrough() -> None:
    daily = [make_candle(50.0, i) for i in range(3)]
    assert aggregate_candles(daily, "D") == daily
    assert aggregate_candles([], "W") == []


# =============================================================================
# MOCK DATA
# =============================================================================


def test_mock_candles_deterministic() -> None:
    end_ms = BASE_TS + 90 * DAY_MS
    first = generate_mock_candles("AAPL", "D", 90, end_ms=end_ms)
    second = generate_mock_candles("aapl", "D", 90, end_ms=end_ms)

    assert first == second
    assert len(first) == 90
    assert first[-1].timestamp == end_ms
    timestamps = [c.timestamp for c in first]
    assert timestamps == sorted(timestamps)


def test_mock_candle_count_by_resolution() -> None:
    assert len(generate_mock_candles("MSFT", "60", 2, end_ms=BASE_TS)) == 48
    assert len(generate_mock_candles("MSFT", "240", 10, end_ms=BASE_TS)) == 60
