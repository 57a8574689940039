"""
PulseChart Schema Contracts

This module defines the JSON contracts between the engine's components and
its collaborators (data provider in, chart renderer out).
"""

from pulsechart.schemas.market import (
    Timeframe,
    TimeframeConfig,
    TIMEFRAME_CONFIG,
    INDICATOR_TIMEFRAME_CONFIG,
    Candle,
    CandleRequest,
)
from pulsechart.schemas.indicators import (
    IndicatorCategory,
    Indicator,
    EnrichedCandle,
    TechnicalSnapshot,
    MACDSignal,
    HistogramTrend,
    DataQuality,
)
from pulsechart.schemas.charts import (
    FetchPhase,
    ChartSelection,
    SessionCreated,
    ChartView,
)

__all__ = [
    # Market
    "Timeframe",
    "TimeframeConfig",
    "TIMEFRAME_CONFIG",
    "INDICATOR_TIMEFRAME_CONFIG",
    "Candle",
    "CandleRequest",
    # Indicators
    "IndicatorCategory",
    "Indicator",
    "EnrichedCandle",
    "TechnicalSnapshot",
    "MACDSignal",
    "HistogramTrend",
    "DataQuality",
    # Charts
    "FetchPhase",
    "ChartSelection",
    "SessionCreated",
    "ChartView",
]
