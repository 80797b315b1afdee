"""
HTTP Service
============
FastAPI application exposing OTP issuance and verification.
"""

from .app import create_app
from .health import create_health_router, HealthStatus
from .state import ServiceState, get_state

__all__ = [
    "create_app",
    "create_health_router",
    "HealthStatus",
    "ServiceState",
    "get_state",
]
