"""
CONTRACT 2: Indicator Engine

Input: list[Candle] + list[Indicator]
Output: list[EnrichedCandle] / TechnicalSnapshot

All derived values are recomputed from the raw candle series.
Pure Python/NumPy - no persistence of computed indicators.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pulsechart.schemas.market import Candle


# =============================================================================
# ENUMS
# =============================================================================


class IndicatorCategory(str, Enum):
    OVERLAY = "overlay"  # drawn on the price pane
    OSCILLATOR = "oscillator"  # drawn in its own pane


class MACDSignal(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class HistogramTrend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    FLAT = "flat"


class DataQuality(str, Enum):
    FULL = "full"
    PARTIAL = "partial"
    INSUFFICIENT = "insufficient"


# =============================================================================
# INDICATOR DESCRIPTOR
# =============================================================================


class Indicator(BaseModel):
    """Chart indicator descriptor driving UI toggles and math selection."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    id: str
    display_name: str
    short_name: str
    category: IndicatorCategory
    enabled: bool = False
    color: str
    params: dict[str, float] = Field(default_factory=dict)


# =============================================================================
# OUTPUT: EnrichedCandle
# =============================================================================


class EnrichedCandle(Candle):
    """
    Candle plus render geometry and per-indicator values.

    Indicator fields are positionally aligned with the source candle array;
    fields of disabled indicators stay None.
    """

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    is_up: bool
    body: tuple[float, float]

    sma20: Optional[float] = None
    sma50: Optional[float] = None
    ema12: Optional[float] = None
    ema26: Optional[float] = None
    bb_upper: Optional[float] = None
    bb_middle: Optional[float] = None
    bb_lower: Optional[float] = None
    vwap: Optional[float] = None
    rsi: Optional[float] = None
    macd: Optional[float] = None
    macd_signal: Optional[float] = None
    macd_histogram: Optional[float] = None


# =============================================================================
# OUTPUT: TechnicalSnapshot
# =============================================================================


class TechnicalSnapshot(BaseModel):
    """Latest-value technical summary for a symbol."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    price: Optional[float] = None
    ma20: Optional[float] = None
    ma50: Optional[float] = None
    ma200: Optional[float] = None
    rsi: Optional[float] = Field(default=None, ge=0, le=100)
    macd_signal: Optional[MACDSignal] = None
    macd_histogram_trend: Optional[HistogramTrend] = None
    volume: Optional[float] = None
    avg_volume: Optional[float] = None
    price_change: Optional[float] = Field(
        default=None, description="Percent change from previous close"
    )
    data_quality: DataQuality
