"""
Chart API Endpoints

Chart sessions (selection, refresh, indicator toggles) and the technical
snapshot for the analysis panel.
"""

import logging

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

from pulsechart.schemas.market import Timeframe, TIMEFRAME_CONFIG
from pulsechart.schemas.indicators import Indicator, TechnicalSnapshot
from pulsechart.schemas.charts import ChartSelection, ChartView, SessionCreated
from pulsechart.services.base import ServiceError, ValidationError
from pulsechart.services.charts import ChartSession, ChartSessionManager, SessionNotFoundError
from pulsechart.services.indicators import (
    DEFAULT_INDICATORS,
    TechnicalSnapshotService,
    UnknownIndicatorError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class TimeframeInfo(BaseModel):
    timeframe: Timeframe
    resolution: str
    days: int
    label: str


def _sessions(request: Request) -> ChartSessionManager:
    return request.app.state.chart_sessions


def _get_session(request: Request, session_id: str) -> ChartSession:
    try:
        return _sessions(request).get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Chart session {session_id} not found")


@router.get("/timeframes", response_model=list[TimeframeInfo])
async def list_timeframes():
    """Supported timeframes and the fetch window each one uses."""
    return [
        TimeframeInfo(
            timeframe=tf,
            resolution=config.resolution,
            days=config.days,
            label=config.label,
        )
        for tf, config in TIMEFRAME_CONFIG.items()
    ]


@router.get("/indicators", response_model=list[Indicator])
async def list_indicators():
    """Indicator catalog with default enabled flags."""
    return list(DEFAULT_INDICATORS)


@router.post("/sessions", response_model=SessionCreated, status_code=201)
async def create_session(request: Request):
    session = _sessions(request).create()
    return SessionCreated(session_id=session.session_id)


@router.get("/sessions/{session_id}", response_model=ChartView)
async def get_session(request: Request, session_id: str):
    """Current chart state with enriched candles."""
    return _get_session(request, session_id).view()


@router.post("/sessions/{session_id}/select", response_model=ChartView)
async def select_chart(request: Request, session_id: str, selection: ChartSelection):
    """
    Select a symbol/timeframe.

    Fresh cached candles are returned without a provider call. Provider
    failures are reported in the view's ``error`` field, not as HTTP errors.
    """
    session = _get_session(request, session_id)
    return await session.select(selection.symbol, selection.timeframe)


@router.post("/sessions/{session_id}/refetch", response_model=ChartView)
async def refetch_chart(
    request: Request,
    session_id: str,
    invalidate: bool = Query(default=False, description="Drop all cached timeframes for the symbol first"),
):
    session = _get_session(request, session_id)
    return await session.refetch(invalidate=invalidate)


@router.post("/sessions/{session_id}/indicators/{indicator_id}/toggle", response_model=ChartView)
async def toggle_indicator(request: Request, session_id: str, indicator_id: str):
    session = _get_session(request, session_id)
    try:
        session.toggle_indicator(indicator_id)
    except UnknownIndicatorError:
        raise HTTPException(status_code=404, detail=f"Unknown indicator: {indicator_id}")
    return session.view()


@router.delete("/sessions/{session_id}", status_code=204)
async def close_session(request: Request, session_id: str):
    try:
        _sessions(request).close(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Chart session {session_id} not found")


@router.get("/snapshot/{symbol}", response_model=TechnicalSnapshot)
async def get_snapshot(request: Request, symbol: str):
    """Latest indicator readings from a year of daily candles."""
    service: TechnicalSnapshotService = request.app.state.snapshot_service
    try:
        return await service.execute(symbol)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ServiceError as e:
        logger.error(f"Snapshot failed for {symbol}: {e}")
        raise HTTPException(status_code=502, detail=e.message)
