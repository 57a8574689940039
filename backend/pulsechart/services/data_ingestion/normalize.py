"""
Candle normalization and aggregation.

Turns raw provider rows into validated Candle models and builds 4-hour,
weekly and monthly bars out of finer ones for sources that cannot serve
those resolutions directly. Timestamps handled here are epoch milliseconds.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Mapping, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from pulsechart.schemas.market import Candle
from pulsechart.services.base import ValidationError

logger = logging.getLogger(__name__)

FOUR_HOURS_MS = 4 * 60 * 60 * 1000
AGGREGATED_RESOLUTIONS = ("240", "W", "M")


def _utc(timestamp_ms: int) -> datetime:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)


def format_candle_date(timestamp_ms: int, resolution: str) -> str:
    """Display label for a bar, granularity chosen by resolution."""
    dt = _utc(timestamp_ms)
    if resolution in ("1", "5", "15", "30", "60"):
        return f"{dt:%H:%M}"
    if resolution == "240":
        return f"{dt:%b} {dt.day} {dt:%H}:00"
    if resolution == "M":
        return f"{dt:%b} {dt:%y}"
    return f"{dt:%b} {dt.day}"


def normalize_candles(
    rows: Iterable[Mapping[str, Any]],
    resolution: str,
    service_name: str,
) -> list[Candle]:
    """
    Validate raw rows into candles.

    Rows violating the OHLC range are dropped with a warning; a non-empty
    payload with no usable rows raises ValidationError.
    """
    candles: list[Candle] = []
    dropped = 0
    total = 0

    for row in rows:
        total += 1
        try:
            timestamp = int(row["timestamp"])
            candles.append(
                Candle(
                    date=row.get("date") or format_candle_date(timestamp, resolution),
                    timestamp=timestamp,
                    open=float(row["open"]),
                    high=float(row["high"]),
                    low=float(row["low"]),
                    close=float(row["close"]),
                    volume=float(row.get("volume") or 0),
                )
            )
        except (AttributeError, KeyError, TypeError, ValueError, PydanticValidationError) as e:
            dropped += 1
            logger.debug(f"[{service_name}] dropping malformed candle {row!r}: {e}")

    if dropped:
        logger.warning(f"[{service_name}] dropped {dropped}/{total} malformed candles")
    if total and not candles:
        raise ValidationError(
            service_name,
            "Provider returned no usable candles",
            {"rows": total},
        )

    return candles


def bucket_start(timestamp_ms: int, resolution: str) -> int:
    """Start of the aggregation bucket containing ``timestamp_ms`` (UTC)."""
    if resolution == "240":
        return timestamp_ms // FOUR_HOURS_MS * FOUR_HOURS_MS

    dt = _utc(timestamp_ms)
    if resolution == "W":
        # Monday 00:00 UTC
        monday = datetime(dt.year, dt.month, dt.day, tzinfo=timezone.utc) - timedelta(days=dt.weekday())
        return int(monday.timestamp() * 1000)
    if resolution == "M":
        month_start = datetime(dt.year, dt.month, 1, tzinfo=timezone.utc)
        return int(month_start.timestamp() * 1000)
    return timestamp_ms


def aggregate_candles(candles: Sequence[Candle], resolution: str) -> list[Candle]:
    """
    Roll finer bars up into ``resolution`` buckets.

    Open comes from the earliest bar in a bucket, close from the latest;
    high/low are the extremes and volume is summed. Resolutions other than
    240/W/M are returned unchanged.
    """
    if not candles:
        return []
    if resolution not in AGGREGATED_RESOLUTIONS:
        return list(candles)

    buckets: dict[int, dict[str, Any]] = {}

    for c in candles:
        start = bucket_start(c.timestamp, resolution)
        bucket: Optional[dict[str, Any]] = buckets.get(start)
        if bucket is None:
            buckets[start] = {
                "open": c.open,
                "high": c.high,
                "low": c.low,
                "close": c.close,
                "volume": c.volume,
                "first": c.timestamp,
                "last": c.timestamp,
            }
            continue

        if c.timestamp < bucket["first"]:
            bucket["first"] = c.timestamp
            bucket["open"] = c.open
        if c.timestamp > bucket["last"]:
            bucket["last"] = c.timestamp
            bucket["close"] = c.close
        bucket["high"] = max(bucket["high"], c.high)
        bucket["low"] = min(bucket["low"], c.low)
        bucket["volume"] += c.volume

    return [
        Candle(
            date=format_candle_date(start, resolution),
            timestamp=start,
            open=b["open"],
            high=b["high"],
            low=b["low"],
            close=b["close"],
            volume=b["volume"],
        )
        for start, b in sorted(buckets.items())
    ]
