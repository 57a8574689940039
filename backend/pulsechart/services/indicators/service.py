"""
Technical Snapshot Service Implementation

Fetches a year of daily candles for a symbol and reduces them to the latest
indicator readings. Pure NumPy math once the candles are in hand.
"""

import logging
from collections import OrderedDict
from typing import Optional

from pulsechart.core.config import settings
from pulsechart.schemas.market import INDICATOR_TIMEFRAME_CONFIG
from pulsechart.schemas.indicators import TechnicalSnapshot
from pulsechart.services.base import BaseService, ValidationError
from pulsechart.services.cache.candle_cache import CandleCache, candle_cache_key
from pulsechart.services.data_ingestion.interface import CandleFetcher
from pulsechart.services.indicators.snapshot import technical_snapshot

logger = logging.getLogger(__name__)

SNAPSHOT_TIMEFRAME = "indicators"


class TechnicalSnapshotService(BaseService[str, TechnicalSnapshot]):
    """
    Technical Snapshot Service.

    INPUT: symbol
    OUTPUT: TechnicalSnapshot built from INDICATOR_TIMEFRAME_CONFIG candles

    Fresh candles are reused from the service's own cache, which holds at
    most ``max_symbols`` symbols (least recently requested evicted first).
    Errors from the provider propagate to the caller.
    """

    def __init__(
        self,
        fetcher: CandleFetcher,
        cache: Optional[CandleCache] = None,
        max_symbols: Optional[int] = None,
    ):
        self._fetch = fetcher
        self._cache = cache if cache is not None else CandleCache()
        self._max_symbols = max_symbols or settings.snapshot_cache_max_symbols
        self._recent: OrderedDict[str, None] = OrderedDict()

    @property
    def name(self) -> str:
        return "TechnicalSnapshotService"

    async def execute(self, input_data: str) -> TechnicalSnapshot:
        symbol = (input_data or "").strip().upper()
        if not symbol:
            raise ValidationError(self.name, "Symbol is required")

        key = candle_cache_key(symbol, SNAPSHOT_TIMEFRAME)
        if self._cache.is_fresh(key):
            candles = self._cache.get(key).candles
        else:
            logger.info(f"Fetching {INDICATOR_TIMEFRAME_CONFIG.label} candles for {symbol}")
            fetched = await self._fetch(symbol, INDICATOR_TIMEFRAME_CONFIG)
            candles = self._cache.set(
                key, sorted(fetched, key=lambda c: c.timestamp)
            ).candles
        self._touch(symbol)

        snapshot = technical_snapshot(candles)
        logger.debug(
            f"Snapshot for {symbol}: {len(candles)} candles, quality={snapshot.data_quality.value}"
        )
        return snapshot

    def _touch(self, symbol: str) -> None:
        self._recent[symbol] = None
        self._recent.move_to_end(symbol)
        while len(self._recent) > self._max_symbols:
            evicted, _ = self._recent.popitem(last=False)
            self._cache.invalidate_symbol(evicted)
            logger.debug(f"Snapshot candles evicted for {evicted}")

    async def health_check(self) -> bool:
        """Pure computation once data is fetched."""
        return True
