"""
Yahoo Finance Candle Adapter

Fetches REAL candles from Yahoo Finance. Yahoo has no 4-hour bars, so 240 is
built from hourly bars; weekly and monthly come straight from Yahoo.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

import pandas as pd
import yfinance as yf

from pulsechart.schemas.market import Candle, CandleRequest
from pulsechart.services.base import ExternalAPIError
from pulsechart.services.data_ingestion.interface import CandleProviderInterface
from pulsechart.services.data_ingestion.normalize import (
    aggregate_candles,
    normalize_candles,
)

logger = logging.getLogger(__name__)


# Resolution mapping for yfinance
INTERVAL_MAP = {
    "60": "1h",
    "240": "1h",
    "D": "1d",
    "W": "1wk",
    "M": "1mo",
}


def _frame_to_rows(hist: pd.DataFrame) -> list[dict]:
    rows = []
    for idx, row in hist.iterrows():
        ts = idx.to_pydatetime()
        # Make timezone aware if not already
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)

        if row[["Open", "High", "Low", "Close"]].isna().any():
            continue

        rows.append(
            {
                "timestamp": int(ts.timestamp() * 1000),
                "open": float(row["Open"]),
                "high": float(row["High"]),
                "low": float(row["Low"]),
                "close": float(row["Close"]),
                "volume": float(row["Volume"]) if not pd.isna(row["Volume"]) else 0.0,
            }
        )
    return rows


class YahooCandleProvider(CandleProviderInterface):
    """yfinance-backed provider; the blocking download runs in a thread."""

    @property
    def name(self) -> str:
        return "YahooFinance"

    def _download(self, symbol: str, resolution: str, days: int) -> pd.DataFrame:
        interval = INTERVAL_MAP.get(resolution, "1d")
        start = datetime.now(timezone.utc) - timedelta(days=days)
        ticker = yf.Ticker(symbol)
        return ticker.history(start=start, interval=interval)

    async def execute(self, input_data: CandleRequest) -> list[Candle]:
        symbol = input_data.symbols[0].upper().strip()
        resolution = input_data.resolution

        logger.info(f"Fetching {symbol} from Yahoo Finance (resolution={resolution})...")
        try:
            hist = await asyncio.to_thread(
                self._download, symbol, resolution, input_data.days
            )
        except Exception as e:
            raise ExternalAPIError(
                self.name, f"Yahoo Finance request failed for {symbol}: {e}"
            ) from e

        if hist is None or hist.empty:
            raise ExternalAPIError(self.name, f"No historical data available for {symbol}")

        candles = normalize_candles(_frame_to_rows(hist), resolution, self.name)
        if resolution == "240":
            candles = aggregate_candles(candles, resolution)
        return candles

    async def health_check(self) -> bool:
        try:
            hist = await asyncio.to_thread(
                lambda: yf.Ticker("SPY").history(period="5d")
            )
            return not hist.empty
        except Exception as e:
            logger.warning(f"Yahoo Finance health check failed: {e}")
            return False
