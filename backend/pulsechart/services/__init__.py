"""
PulseChart Services

Candle providers, the candle cache, the fetch orchestrator and the indicator
engine. Boundary services have a defined interface (contract) and
implementation.
"""

from pulsechart.services.base import BaseService, ServiceError

__all__ = ["BaseService", "ServiceError"]
