"""
CONTRACT 1: Candle Data

Input: CandleRequest
Output: list[Candle]

Raw OHLCV bars as delivered by the market-data provider, and the fixed
timeframe table that maps a chart timeframe onto a provider resolution.
"""

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, model_validator


# =============================================================================
# ENUMS
# =============================================================================


class Timeframe(str, Enum):
    H1 = "1H"
    H4 = "4H"
    D1 = "1D"
    W1 = "1W"
    MN1 = "1M"


# =============================================================================
# TIMEFRAME CONFIG
# =============================================================================


class TimeframeConfig(BaseModel):
    """Provider resolution code and lookback window for a timeframe."""

    model_config = ConfigDict(frozen=True)

    resolution: str = Field(..., description="Provider resolution code (60, 240, D, W, M)")
    days: int = Field(..., gt=0, description="Lookback window in days")
    label: str


# Single source of truth for timeframe -> provider parameters
TIMEFRAME_CONFIG: dict[Timeframe, TimeframeConfig] = {
    Timeframe.H1: TimeframeConfig(resolution="60", days=2, label="1 Hour"),
    Timeframe.H4: TimeframeConfig(resolution="240", days=10, label="4 Hours"),
    Timeframe.D1: TimeframeConfig(resolution="D", days=90, label="Daily"),
    Timeframe.W1: TimeframeConfig(resolution="W", days=365, label="Weekly"),
    Timeframe.MN1: TimeframeConfig(resolution="M", days=730, label="Monthly"),
}

# A full year of dailies so the 200-period average has enough history
INDICATOR_TIMEFRAME_CONFIG = TimeframeConfig(
    resolution="D", days=365, label="Technical Analysis"
)


def get_timeframe_config(timeframe: Timeframe) -> TimeframeConfig:
    return TIMEFRAME_CONFIG[Timeframe(timeframe)]


# =============================================================================
# CANDLE
# =============================================================================


class Candle(BaseModel):
    """Single OHLCV bar. Immutable once constructed."""

    model_config = ConfigDict(frozen=True)

    date: str = Field(..., description="Display label")
    timestamp: int = Field(..., description="Epoch timestamp (ordering only)")
    open: float
    high: float
    low: float
    close: float
    volume: float = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_range(self) -> "Candle":
        body_low = min(self.open, self.close)
        body_high = max(self.open, self.close)
        if not (self.low <= body_low and body_high <= self.high):
            raise ValueError(
                f"candle range violated: low={self.low} open={self.open} "
                f"close={self.close} high={self.high}"
            )
        return self


# =============================================================================
# PROVIDER BOUNDARY
# =============================================================================


class CandleRequest(BaseModel):
    """
    Request sent to the market-data provider.
    Sent by: Fetch Orchestrator
    Received by: Candle provider
    """

    symbols: list[str] = Field(..., min_length=1)
    type: str = "candles"
    resolution: str
    days: int = Field(..., gt=0)

    @classmethod
    def for_symbol(cls, symbol: str, config: TimeframeConfig) -> "CandleRequest":
        return cls(symbols=[symbol], resolution=config.resolution, days=config.days)
