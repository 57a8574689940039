"""
In-memory candle cache for instant timeframe switching.

Keys:
- {SYMBOL}::{timeframe} -> CacheEntry (candles + fetch time)

Entries are never expired proactively. Staleness is decided at read time so
an old series can still be painted while a refresh is in flight.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence

from pulsechart.core.config import settings
from pulsechart.schemas.market import Candle, Timeframe

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def candle_cache_key(symbol: str, timeframe) -> str:
    """Build the cache key for a symbol/timeframe pair."""
    if isinstance(timeframe, Timeframe):
        timeframe = timeframe.value
    return f"{symbol.upper()}::{timeframe}"


@dataclass(frozen=True)
class CacheEntry:
    candles: tuple[Candle, ...]
    fetched_at_ms: int


class CandleCache:
    """
    Symbol/timeframe -> most recently fetched candle series.

    Owned by a single orchestrator; there is no process-wide instance.
    """

    def __init__(self, ttl_seconds: Optional[float] = None, clock: Optional[Clock] = None):
        self.ttl_seconds = settings.candle_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock or time.time
        self._entries: dict[str, CacheEntry] = {}

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for ``key`` whether fresh or stale."""
        return self._entries.get(key)

    def set(self, key: str, candles: Sequence[Candle]) -> CacheEntry:
        """Store candles under ``key`` stamped with the current time."""
        entry = CacheEntry(candles=tuple(candles), fetched_at_ms=self._now_ms())
        self._entries[key] = entry
        logger.debug(f"Cached {len(entry.candles)} candles for {key}")
        return entry

    def is_fresh(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        return self._now_ms() - entry.fetched_at_ms < self.ttl_seconds * 1000

    def age_seconds(self, key: str) -> Optional[float]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        return (self._now_ms() - entry.fetched_at_ms) / 1000

    def invalidate_symbol(self, symbol: str) -> int:
        """Drop every timeframe cached for ``symbol``. Returns entries removed."""
        prefix = f"{symbol.upper()}::"
        stale = [k for k in self._entries if k.startswith(prefix)]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug(f"Invalidated {len(stale)} cache entries for {symbol.upper()}")
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
