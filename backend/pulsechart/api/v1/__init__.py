"""
API v1 Router

All API endpoints for the chart frontend.
"""

from fastapi import APIRouter

from pulsechart.api.v1.endpoints import charts

router = APIRouter()

# Include all endpoint routers
router.include_router(charts.router, prefix="/charts", tags=["Charts"])
