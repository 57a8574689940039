"""
Cache module for PulseChart.

Provides the short-lived candle cache behind instant timeframe switching.
"""

from pulsechart.services.cache.candle_cache import (
    CacheEntry,
    CandleCache,
    candle_cache_key,
)

__all__ = [
    "CacheEntry",
    "CandleCache",
    "candle_cache_key",
]
