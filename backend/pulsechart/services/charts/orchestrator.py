"""
Chart Data Orchestrator

Owns the request lifecycle for one chart's (symbol, timeframe) selection:
consult the cache, fetch when stale, and make sure only the most recent
request can update what the chart shows.

Ordering guard: every selection or refresh bumps a per-instance sequence
counter and each fetch captures the value it was issued under. When a
response (success or failure) lands and the captured value no longer
matches the counter, a newer request has superseded it and the response is
dropped without touching the cache, the loading flag, the candles or the
error. Superseded requests are not aborted, only ignored.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional

from pulsechart.schemas.market import Candle, Timeframe, get_timeframe_config
from pulsechart.schemas.charts import FetchPhase
from pulsechart.services.cache.candle_cache import CandleCache, Clock, candle_cache_key
from pulsechart.services.data_ingestion.interface import CandleFetcher

logger = logging.getLogger(__name__)

DEFAULT_ERROR = "Failed to fetch candles"


@dataclass(frozen=True)
class ChartDataState:
    """Visible chart state. A new instance is committed on every change."""

    symbol: Optional[str] = None
    timeframe: Optional[Timeframe] = None
    key: Optional[str] = None
    candles: tuple[Candle, ...] = ()
    loading: bool = False
    error: Optional[str] = None
    phase: FetchPhase = FetchPhase.IDLE


StateListener = Callable[[ChartDataState], None]


def _error_message(exc: BaseException) -> str:
    return getattr(exc, "message", None) or str(exc) or DEFAULT_ERROR


class ChartDataOrchestrator:
    """
    Fetch orchestrator for a single chart.

    Cache and sequence counter are instance fields; independent charts get
    independent orchestrators.
    """

    def __init__(
        self,
        fetcher: CandleFetcher,
        cache: Optional[CandleCache] = None,
        clock: Optional[Clock] = None,
    ):
        self._fetch = fetcher
        self._cache = cache if cache is not None else CandleCache(clock=clock)
        self._sequence = 0
        self._state = ChartDataState()
        self._listeners: list[StateListener] = []

    # ============ Read-only views ============

    @property
    def state(self) -> ChartDataState:
        return self._state

    @property
    def cache(self) -> CandleCache:
        return self._cache

    @property
    def sequence(self) -> int:
        return self._sequence

    @property
    def candles(self) -> tuple[Candle, ...]:
        return self._state.candles

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    # ============ Listeners ============

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with every committed state. Returns an unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, **changes) -> ChartDataState:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("Chart state listener failed")
        return self._state

    def _next_sequence(self) -> int:
        self._sequence += 1
        return self._sequence

    # ============ Lifecycle ============

    async def select(self, symbol: Optional[str], timeframe: Timeframe) -> ChartDataState:
        """
        Resolve candles for a new symbol/timeframe selection.

        Returns the visible state once this request settles or is superseded.
        """
        # Any selection supersedes whatever is still in flight
        seq = self._next_sequence()
        symbol = (symbol or "").strip().upper()

        if not symbol:
            return self._commit(
                symbol=None,
                timeframe=None,
                key=None,
                candles=(),
                loading=False,
                error=None,
                phase=FetchPhase.IDLE,
            )

        timeframe = Timeframe(timeframe)
        key = candle_cache_key(symbol, timeframe)

        if key != self._state.key:
            # Never show the previous key's candles under the new label
            self._commit(
                symbol=symbol,
                timeframe=timeframe,
                key=key,
                candles=(),
                loading=True,
                error=None,
                phase=FetchPhase.RESOLVING,
            )
        else:
            self._commit(phase=FetchPhase.RESOLVING, error=None)

        if self._cache.is_fresh(key):
            entry = self._cache.get(key)
            logger.debug(f"Fresh cache hit for {key}")
            return self._commit(
                candles=entry.candles,
                loading=False,
                error=None,
                phase=FetchPhase.FRESH_HIT,
            )

        return await self._fetch_into(symbol, timeframe, key, seq)

    async def refetch(self, invalidate: bool = False) -> ChartDataState:
        """
        Re-issue the fetch for the current selection, ignoring freshness.

        Supersedes any outstanding fetch. ``invalidate`` also drops every
        cached timeframe for the symbol first.
        """
        state = self._state
        if state.key is None:
            return state

        if invalidate:
            self._cache.invalidate_symbol(state.symbol)

        seq = self._next_sequence()
        return await self._fetch_into(state.symbol, state.timeframe, state.key, seq)

    async def _fetch_into(
        self, symbol: str, timeframe: Timeframe, key: str, seq: int
    ) -> ChartDataState:
        config = get_timeframe_config(timeframe)

        # Keep painting what we have for this key; only show the big loading
        # state when there is nothing to render yet
        self._commit(
            loading=not self._state.candles,
            error=None,
            phase=FetchPhase.FETCHING,
        )
        logger.info(
            f"Fetching {symbol} {timeframe.value}: resolution={config.resolution}, "
            f"days={config.days} (seq={seq})"
        )

        try:
            fetched = await self._fetch(symbol, config)
        except Exception as e:
            if seq != self._sequence:
                logger.debug(f"Discarding superseded failure for {key} (seq={seq})")
                return self._state
            logger.error(f"Error fetching candles for {key}: {e}")
            return self._commit(
                loading=False,
                error=_error_message(e),
                phase=FetchPhase.FAILED,
            )

        if seq != self._sequence:
            logger.debug(
                f"Discarding superseded response for {key} (seq={seq}, current={self._sequence})"
            )
            return self._state

        ordered = sorted(fetched, key=lambda c: c.timestamp)
        entry = self._cache.set(key, ordered)
        logger.info(f"Received {len(entry.candles)} candles for {key}")

        return self._commit(
            candles=entry.candles,
            loading=False,
            error=None,
            phase=FetchPhase.SETTLED,
        )
