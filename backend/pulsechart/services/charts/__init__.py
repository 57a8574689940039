"""
Chart Data Service

CONTRACT:
    Input:  ChartSelection (symbol + timeframe)
    Output: ChartView (enriched candles + loading/error flags)

RESPONSIBILITIES:
    - Serve fresh cached candles without a network call
    - Fetch stale or missing series through the candle provider
    - Discard out-of-order responses so the newest selection always wins
    - Keep prior candles on failure and surface the error
"""

from pulsechart.services.charts.orchestrator import ChartDataOrchestrator, ChartDataState
from pulsechart.services.charts.session import (
    ChartSession,
    ChartSessionManager,
    SessionNotFoundError,
)

__all__ = [
    "ChartDataOrchestrator",
    "ChartDataState",
    "ChartSession",
    "ChartSessionManager",
    "SessionNotFoundError",
]
