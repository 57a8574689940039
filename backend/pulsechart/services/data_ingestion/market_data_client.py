"""
Market Data Function Client

Fetches candles from the dashboard's market-data edge function:

    POST {market_data_url}
    {"symbols": ["AAPL"], "type": "candles", "resolution": "D", "days": 90}

    -> {"candles": [{date, timestamp, open, high, low, close, volume}, ...]}
    -> {"error": "..."} on failure

The per-request timeout lives here, at the network boundary. Transient
failures (connection errors, timeouts, 429, 5xx) are retried with
exponential backoff.
"""

import asyncio
import logging
from typing import Any, Optional

import aiohttp
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from pulsechart.core.config import settings
from pulsechart.schemas.market import Candle, CandleRequest
from pulsechart.services.base import ExternalAPIError, RateLimitError
from pulsechart.services.data_ingestion.interface import CandleProviderInterface
from pulsechart.services.data_ingestion.normalize import normalize_candles

logger = logging.getLogger(__name__)


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, ExternalAPIError) and bool(exc.details.get("transient"))


class MarketDataFunctionClient(CandleProviderInterface):
    """
    aiohttp client for the market-data function.

    Holds one ClientSession, created lazily and closed by ``close()``.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_attempts: Optional[int] = None,
        backoff_max_seconds: Optional[float] = None,
    ):
        self._url = url or settings.market_data_url
        self._api_key = api_key if api_key is not None else settings.market_data_api_key
        self._timeout = aiohttp.ClientTimeout(
            total=timeout_seconds or settings.request_timeout_seconds
        )
        self._max_attempts = max_attempts or settings.fetch_max_attempts
        self._backoff_max = (
            backoff_max_seconds
            if backoff_max_seconds is not None
            else settings.fetch_backoff_max_seconds
        )
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def name(self) -> str:
        return "MarketDataFunction"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
            headers["apikey"] = self._api_key
        return headers

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers=self._headers(), timeout=self._timeout
            )
        return self._session

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(
                multiplier=0.5, min=min(0.5, self._backoff_max), max=self._backoff_max
            ),
            retry=retry_if_exception(_is_transient),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    async def _post(self, request: CandleRequest) -> dict[str, Any]:
        session = await self._ensure_session()
        symbol = request.symbols[0]

        try:
            async with session.post(self._url, json=request.model_dump()) as resp:
                if resp.status == 429:
                    raise RateLimitError(
                        self.name,
                        f"Rate limited fetching {symbol}",
                        {"status": 429, "transient": True},
                    )
                if resp.status >= 400:
                    body = await resp.text()
                    raise ExternalAPIError(
                        self.name,
                        f"HTTP {resp.status} fetching {symbol}: {body[:200]}",
                        {"status": resp.status, "transient": resp.status >= 500},
                    )
                try:
                    data = await resp.json(content_type=None)
                except ValueError as e:
                    raise ExternalAPIError(
                        self.name,
                        f"Invalid JSON from market-data for {symbol}",
                        {"status": resp.status},
                    ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ExternalAPIError(
                self.name,
                f"Network error fetching {symbol}: {e or type(e).__name__}",
                {"transient": True},
            ) from e

        if not isinstance(data, dict):
            raise ExternalAPIError(self.name, f"Unexpected payload for {symbol}")
        return data

    async def execute(self, input_data: CandleRequest) -> list[Candle]:
        """Fetch and normalize candles for the request's symbol."""
        symbol = input_data.symbols[0]
        logger.info(
            f"Fetching {symbol} candles: resolution={input_data.resolution}, days={input_data.days}"
        )

        async for attempt in self._retrying():
            with attempt:
                data = await self._post(input_data)

        if data.get("error"):
            raise ExternalAPIError(self.name, str(data["error"]), {"symbol": symbol})

        candles = normalize_candles(data.get("candles") or [], input_data.resolution, self.name)
        logger.info(f"Received {len(candles)} candles for {symbol}")
        return candles

    async def health_check(self) -> bool:
        try:
            session = await self._ensure_session()
            async with session.options(self._url) as resp:
                return resp.status < 500
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Market data function unreachable: {e}")
            return False

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
