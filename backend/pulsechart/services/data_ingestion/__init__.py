"""
Data Ingestion Service

CONTRACT:
    Input:  CandleRequest
    Output: list[Candle]

RESPONSIBILITIES:
    - Fetch OHLCV candles from the market-data function (or Yahoo / mock)
    - Normalize rows into validated Candle models
    - Aggregate finer bars where a source lacks a resolution
    - Enforce the network timeout and retry transient failures

NO CACHING HERE - the orchestrator owns the candle cache.
"""

from pulsechart.services.data_ingestion.interface import (
    CandleFetcher,
    CandleProviderInterface,
)
from pulsechart.services.data_ingestion.market_data_client import MarketDataFunctionClient
from pulsechart.services.data_ingestion.mock_data import MockCandleProvider
from pulsechart.services.data_ingestion.service import create_candle_provider

__all__ = [
    "CandleFetcher",
    "CandleProviderInterface",
    "MarketDataFunctionClient",
    "MockCandleProvider",
    "create_candle_provider",
]
