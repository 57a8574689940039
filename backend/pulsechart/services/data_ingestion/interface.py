"""
Candle Provider Interface

Defines the contract for the market-data boundary the orchestrator fetches
through.
"""

from abc import abstractmethod
from typing import Awaitable, Callable, Sequence

from pulsechart.services.base import BaseService
from pulsechart.schemas.market import Candle, CandleRequest, TimeframeConfig

# What the orchestrator actually depends on: fetch(symbol, config) -> candles
CandleFetcher = Callable[[str, TimeframeConfig], Awaitable[Sequence[Candle]]]


class CandleProviderInterface(BaseService[CandleRequest, list[Candle]]):
    """
    Candle Provider Contract.

    INPUT: CandleRequest
        - symbols: single-element list with the symbol to fetch
        - type: always "candles"
        - resolution: provider resolution code (60, 240, D, W, M)
        - days: lookback window

    OUTPUT: list[Candle]
        - OHLCV bars, provider order (callers sort)

    RAISES: ExternalAPIError on network/provider failure
    """

    @property
    def name(self) -> str:
        return "CandleProvider"

    @abstractmethod
    async def execute(self, input_data: CandleRequest) -> list[Candle]:
        """Fetch candles for the request's first symbol."""
        pass

    async def fetch_candles(self, symbol: str, config: TimeframeConfig) -> list[Candle]:
        """Convenience form matching ``CandleFetcher``."""
        return await self.execute(CandleRequest.for_symbol(symbol, config))

    @abstractmethod
    async def health_check(self) -> bool:
        """Check connectivity to the data source."""
        pass

    async def close(self) -> None:
        """Release network resources. Default: nothing to release."""
        return None
