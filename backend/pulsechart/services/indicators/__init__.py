"""
Indicator Engine Service

CONTRACT:
    Input:  list[Candle] + indicator collection
    Output: list[EnrichedCandle] / TechnicalSnapshot

RESPONSIBILITIES:
    - Calculate indicator series (SMA, EMA, Bollinger Bands, VWAP, RSI, MACD)
    - Keep the catalog of chart indicators and their toggle state
    - Zip enabled series onto candles for rendering
    - Summarize the latest readings for the analysis panel

PURE PYTHON - Uses NumPy for calculations.
All math is deterministic and reproducible.
"""

from pulsechart.services.indicators.registry import (
    DEFAULT_INDICATORS,
    IndicatorSet,
    UnknownIndicatorError,
    default_indicators,
)
from pulsechart.services.indicators.enrichment import EnrichmentPipeline, enrich
from pulsechart.services.indicators.snapshot import technical_snapshot
from pulsechart.services.indicators.service import TechnicalSnapshotService

__all__ = [
    "DEFAULT_INDICATORS",
    "IndicatorSet",
    "UnknownIndicatorError",
    "default_indicators",
    "EnrichmentPipeline",
    "enrich",
    "technical_snapshot",
    "TechnicalSnapshotService",
]
