"""
CONTRACT 3: Chart Sessions

Input: ChartSelection
Output: ChartView

What the chart renderer consumes: enriched candles plus the loading/error
flags and the indicator collection it toggles.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pulsechart.schemas.market import Timeframe
from pulsechart.schemas.indicators import EnrichedCandle, Indicator


class FetchPhase(str, Enum):
    IDLE = "idle"  # no symbol selected
    RESOLVING = "resolving"  # checking the cache
    FRESH_HIT = "fresh_hit"  # served from cache, no network call
    FETCHING = "fetching"  # network call outstanding
    SETTLED = "settled"  # success, data + cache updated
    FAILED = "failed"  # error surfaced, prior data retained


class ChartSelection(BaseModel):
    """Symbol/timeframe picked by the user."""

    symbol: str = Field(..., max_length=32)
    timeframe: Timeframe = Timeframe.D1


class SessionCreated(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    session_id: str


class ChartView(BaseModel):
    """Render-ready chart state for one session."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    session_id: str
    symbol: Optional[str] = None
    timeframe: Optional[Timeframe] = None
    phase: FetchPhase
    loading: bool
    error: Optional[str] = None
    candles: list[EnrichedCandle]
    indicators: list[Indicator]
    # Raw extents for the renderer's coordinate mapping
    price_range: Optional[tuple[float, float]] = None
    time_range: Optional[tuple[int, int]] = None
