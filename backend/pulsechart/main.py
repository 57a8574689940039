"""
PulseChart Engine - FastAPI Application

Main entry point for the backend API.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pulsechart.core.config import settings
from pulsechart.core.logging import setup_logging
from pulsechart.api.v1 import router as api_v1_router
from pulsechart.services.charts import ChartSessionManager
from pulsechart.services.data_ingestion import CandleProviderInterface, create_candle_provider
from pulsechart.services.indicators import TechnicalSnapshotService

logger = logging.getLogger(__name__)


def create_app(provider: Optional[CandleProviderInterface] = None) -> FastAPI:
    """Build the application. ``provider`` overrides the configured one."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        # Startup
        setup_logging()
        logger.info(f"Starting {settings.app_name} v{settings.app_version}")
        logger.info(f"Environment: {settings.environment}")

        candle_provider = provider or create_candle_provider()
        app.state.candle_provider = candle_provider
        app.state.chart_sessions = ChartSessionManager(candle_provider.fetch_candles)
        app.state.snapshot_service = TechnicalSnapshotService(candle_provider.fetch_candles)

        yield

        # Shutdown
        logger.info("Shutting down...")
        await candle_provider.close()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
        PulseChart market time-series engine

        ## Architecture
        - **Data Ingestion**: Fetches OHLCV candles from the market-data function
        - **Candle Cache**: Per-chart TTL cache for instant timeframe switching
        - **Chart Orchestrator**: Newest selection always wins, stale responses dropped
        - **Indicator Engine**: SMA/EMA/Bollinger/VWAP/RSI/MACD (pure Python/NumPy)
        """,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    cors_origins = [settings.frontend_url]
    if settings.allowed_origins:
        cors_origins.extend([o for o in settings.allowed_origins if o not in cors_origins])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API routes
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        candle_provider = app.state.candle_provider
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "provider": candle_provider.name,
            "chart_sessions": len(app.state.chart_sessions),
        }

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "PulseChart Engine API",
            "docs": "/docs",
            "health": "/health",
        }

    return app


app = create_app()
