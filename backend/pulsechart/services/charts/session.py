"""
Chart Sessions

A session is one chart on screen: its own orchestrator (and therefore its
own cache and request counter), indicator collection and enrichment memo.
The manager keeps sessions by id for the HTTP layer. Sessions idle longer
than the configured window are dropped, and past the cap the least recently
used session is evicted.
"""

import logging
import time
import uuid
from collections import OrderedDict
from typing import Optional

from pulsechart.core.config import settings
from pulsechart.schemas.market import Timeframe
from pulsechart.schemas.indicators import EnrichedCandle, Indicator
from pulsechart.schemas.charts import ChartView
from pulsechart.services.charts.orchestrator import ChartDataOrchestrator, ChartDataState
from pulsechart.services.cache.candle_cache import Clock
from pulsechart.services.data_ingestion.interface import CandleFetcher
from pulsechart.services.indicators.enrichment import EnrichmentPipeline
from pulsechart.services.indicators.registry import IndicatorSet

logger = logging.getLogger(__name__)


class SessionNotFoundError(KeyError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(session_id)


class ChartSession:
    def __init__(self, session_id: str, fetcher: CandleFetcher):
        self.session_id = session_id
        self.orchestrator = ChartDataOrchestrator(fetcher)
        self.indicators = IndicatorSet()
        self.pipeline = EnrichmentPipeline()

    @property
    def state(self) -> ChartDataState:
        return self.orchestrator.state

    async def select(self, symbol: Optional[str], timeframe: Timeframe) -> ChartView:
        await self.orchestrator.select(symbol, timeframe)
        return self.view()

    async def refetch(self, invalidate: bool = False) -> ChartView:
        await self.orchestrator.refetch(invalidate=invalidate)
        return self.view()

    def toggle_indicator(self, indicator_id: str) -> Indicator:
        """Flip one indicator. Unknown ids raise UnknownIndicatorError."""
        return self.indicators.toggle(indicator_id)

    def enriched(self) -> list[EnrichedCandle]:
        return self.pipeline.run(self.state.candles, self.indicators.items)

    def view(self) -> ChartView:
        state = self.state
        candles = state.candles

        price_range = time_range = None
        if candles:
            price_range = (min(c.low for c in candles), max(c.high for c in candles))
            time_range = (candles[0].timestamp, candles[-1].timestamp)

        return ChartView(
            session_id=self.session_id,
            symbol=state.symbol,
            timeframe=state.timeframe,
            phase=state.phase,
            loading=state.loading,
            error=state.error,
            candles=self.enriched(),
            indicators=self.indicators.items,
            price_range=price_range,
            time_range=time_range,
        )


class ChartSessionManager:
    """
    In-process registry of chart sessions sharing one candle provider.

    Kept in least-recently-used order. ``create`` and ``get`` count as use.
    """

    def __init__(
        self,
        fetcher: CandleFetcher,
        max_sessions: Optional[int] = None,
        idle_seconds: Optional[float] = None,
        clock: Optional[Clock] = None,
    ):
        self._fetch = fetcher
        self._max_sessions = max_sessions or settings.chart_session_max
        self._idle_seconds = (
            idle_seconds if idle_seconds is not None else settings.chart_session_idle_seconds
        )
        self._clock = clock or time.time
        # session_id -> (session, last used)
        self._sessions: OrderedDict[str, tuple[ChartSession, float]] = OrderedDict()

    def create(self) -> ChartSession:
        self.sweep()
        session_id = uuid.uuid4().hex
        session = ChartSession(session_id, self._fetch)
        self._sessions[session_id] = (session, self._clock())

        while len(self._sessions) > self._max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info(f"Chart session evicted (limit {self._max_sessions}): {evicted_id}")

        logger.info(f"Chart session created: {session_id}")
        return session

    def get(self, session_id: str) -> ChartSession:
        self.sweep()
        entry = self._sessions.get(session_id)
        if entry is None:
            raise SessionNotFoundError(session_id)
        session = entry[0]
        self._sessions[session_id] = (session, self._clock())
        self._sessions.move_to_end(session_id)
        return session

    def close(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(session_id)
        logger.info(f"Chart session closed: {session_id}")

    def sweep(self) -> int:
        """Drop sessions idle past the window. Returns how many were dropped."""
        if self._idle_seconds <= 0:
            return 0
        cutoff = self._clock() - self._idle_seconds
        expired = [sid for sid, (_, last_used) in self._sessions.items() if last_used < cutoff]
        for session_id in expired:
            del self._sessions[session_id]
            logger.info(f"Chart session expired: {session_id}")
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions
