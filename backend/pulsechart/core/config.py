"""
Application Configuration

All settings loaded from environment variables.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    app_name: str = "PulseChart Engine"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS (Frontend URL)
    frontend_url: str = "http://localhost:5173"
    allowed_origins: list[str] = ["http://localhost:5173"]

    # Candle provider: market_data | yahoo | mock
    candle_provider: str = "market_data"

    # Market data function (POST {symbols, type, resolution, days})
    market_data_url: str = "http://localhost:54321/functions/v1/market-data"
    market_data_api_key: Optional[str] = None

    # Network boundary
    request_timeout_seconds: float = 20.0
    fetch_max_attempts: int = 3
    fetch_backoff_max_seconds: float = 8.0

    # Client candle cache, matches the provider's server-side cache window
    candle_cache_ttl_seconds: float = 60.0

    # Chart sessions: idle ones are dropped, oldest evicted past the cap
    chart_session_max: int = 500
    chart_session_idle_seconds: float = 1800.0

    # Technical snapshot service keeps candles for at most this many symbols
    snapshot_cache_max_symbols: int = 256

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
