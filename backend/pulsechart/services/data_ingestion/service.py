"""
Candle provider selection.

One provider is configured at a time (``settings.candle_provider``); results
from different providers are never merged.
"""

import logging
from typing import Optional

from pulsechart.core.config import settings
from pulsechart.services.data_ingestion.interface import CandleProviderInterface
from pulsechart.services.data_ingestion.market_data_client import MarketDataFunctionClient
from pulsechart.services.data_ingestion.mock_data import MockCandleProvider

logger = logging.getLogger(__name__)

PROVIDERS = ("market_data", "yahoo", "mock")


def create_candle_provider(kind: Optional[str] = None) -> CandleProviderInterface:
    """Build the configured provider. Unknown kinds raise ValueError."""
    kind = (kind or settings.candle_provider).lower()

    if kind == "market_data":
        provider: CandleProviderInterface = MarketDataFunctionClient()
    elif kind == "yahoo":
        # Imported lazily: pulls in pandas/yfinance
        from pulsechart.services.data_ingestion.yahoo_adapter import YahooCandleProvider

        provider = YahooCandleProvider()
    elif kind == "mock":
        provider = MockCandleProvider()
    else:
        raise ValueError(f"Unknown candle provider '{kind}', expected one of {PROVIDERS}")

    logger.info(f"Candle provider: {provider.name}")
    return provider
