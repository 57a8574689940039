"""
Mock Data Generator

Generates deterministic random-walk candles for development and testing.
The same symbol/resolution/end time always yields the same series.
"""

import asyncio
import logging
import random
import time
from typing import Optional

from pulsechart.schemas.market import Candle, CandleRequest
from pulsechart.services.data_ingestion.interface import CandleProviderInterface
from pulsechart.services.data_ingestion.normalize import format_candle_date

logger = logging.getLogger(__name__)


# Base prices for common symbols
SYMBOL_BASE_PRICES = {
    "AAPL": 190.0,
    "MSFT": 410.0,
    "NVDA": 880.0,
    "TSLA": 175.0,
    "AMZN": 180.0,
    "GOOGL": 150.0,
    "META": 490.0,
    "SPY": 510.0,
    "QQQ": 440.0,
}

DAY_MS = 86_400_000

# Resolution to bar spacing in milliseconds
RESOLUTION_MS = {
    "60": 3_600_000,
    "240": 14_400_000,
    "D": DAY_MS,
    "W": 7 * DAY_MS,
    "M": 30 * DAY_MS,
}


def get_base_price(symbol: str) -> float:
    """Get base price for a symbol."""
    if symbol in SYMBOL_BASE_PRICES:
        return SYMBOL_BASE_PRICES[symbol]
    # Stable per-symbol price in [50, 550)
    return 50.0 + (sum(map(ord, symbol)) * 37) % 500


def generate_mock_candles(
    symbol: str,
    resolution: str,
    days: int,
    end_ms: Optional[int] = None,
) -> list[Candle]:
    """Generate mock OHLCV candles covering ``days`` at ``resolution``."""
    symbol = symbol.upper()
    interval_ms = RESOLUTION_MS.get(resolution, DAY_MS)
    count = max(1, days * DAY_MS // interval_ms)

    if end_ms is None:
        end_ms = int(time.time() * 1000)
    end_ms = end_ms // interval_ms * interval_ms

    rng = random.Random(f"{symbol}:{resolution}:{end_ms}")
    price = get_base_price(symbol)
    volatility = price * 0.02  # 2% volatility

    candles = []
    timestamp = end_ms - interval_ms * (count - 1)

    for _ in range(count):
        # Random walk
        change = (rng.random() - 0.5) * volatility

        open_price = price
        close_price = max(open_price + change, 0.01)
        high_price = max(open_price, close_price) + rng.random() * volatility * 0.5
        low_price = max(min(open_price, close_price) - rng.random() * volatility * 0.5, 0.01)

        candles.append(
            Candle(
                date=format_candle_date(timestamp, resolution),
                timestamp=timestamp,
                open=round(open_price, 2),
                high=round(high_price, 2),
                low=round(low_price, 2),
                close=round(close_price, 2),
                volume=rng.randint(100_000, 5_000_000),
            )
        )

        price = close_price
        timestamp += interval_ms

    return candles


class MockCandleProvider(CandleProviderInterface):
    """Offline provider; ``delay_seconds`` simulates network latency."""

    def __init__(self, delay_seconds: float = 0.0, end_ms: Optional[int] = None):
        self._delay = delay_seconds
        self._end_ms = end_ms

    @property
    def name(self) -> str:
        return "MockCandleProvider"

    async def execute(self, input_data: CandleRequest) -> list[Candle]:
        if self._delay:
            await asyncio.sleep(self._delay)
        symbol = input_data.symbols[0]
        candles = generate_mock_candles(
            symbol, input_data.resolution, input_data.days, self._end_ms
        )
        logger.debug(f"Generated {len(candles)} mock candles for {symbol}")
        return candles

    async def health_check(self) -> bool:
        return True
