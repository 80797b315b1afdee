"""
Health Check Router
===================
Health, liveness and readiness endpoints with component status.
"""

import time
from typing import Optional, Dict, Any
from fastapi import APIRouter
from pydantic import BaseModel
from enum import Enum
import structlog

from mailotp_core.mail import BaseMailDispatcher
from mailotp_core.otp import OTPStore

logger = structlog.get_logger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    status: str
    details: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: HealthStatus
    service: str
    version: str
    components: Dict[str, ComponentHealth]
    timestamp: float


def check_store(store: OTPStore) -> ComponentHealth:
    """Report how many records the store currently holds."""
    return ComponentHealth(status="ok", details={"live_records": len(store)})


async def check_mail(dispatcher: BaseMailDispatcher) -> ComponentHealth:
    """Report whether mail leaves the process or only reaches the log."""
    try:
        healthy = await dispatcher.health_check()
    except Exception as e:
        logger.error("Mail health check failed", error=str(e))
        return ComponentHealth(status="error", error=str(e))

    details = {"dispatcher": dispatcher.name, "enabled": dispatcher.enabled}
    transport = getattr(dispatcher, "transport", None)
    if transport is not None:
        details["transport"] = transport.name

    if healthy and dispatcher.enabled:
        return ComponentHealth(status="connected", details=details)
    return ComponentHealth(status="console", details=details)


def create_health_router(
    service_name: str,
    store: OTPStore,
    dispatcher: BaseMailDispatcher,
    version: str = "1.0.0",
) -> APIRouter:
    """
    Create a health check router.

    Args:
        service_name: Name of the service
        store: The OTP store
        dispatcher: The mail dispatcher
        version: Service version

    Returns:
        FastAPI router with /health, /health/live, and /health/ready endpoints
    """
    router = APIRouter(tags=["Health"])

    @router.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check with store and mail status."""
        components = {
            "otp_store": check_store(store),
            "mail": await check_mail(dispatcher),
        }

        overall_status = HealthStatus.HEALTHY
        if components["mail"].status == "error":
            overall_status = HealthStatus.UNHEALTHY
        elif components["mail"].status != "connected":
            # Codes are still issued; they just go to the log
            overall_status = HealthStatus.DEGRADED

        return HealthResponse(
            status=overall_status,
            service=service_name,
            version=version,
            components=components,
            timestamp=time.time(),
        )

    @router.get("/health/live")
    async def liveness_probe():
        """Always returns 200 if the process is serving requests."""
        return {"status": "alive"}

    @router.get("/health/ready")
    async def readiness_probe():
        """The store is in memory, so the service is ready once started."""
        return {"status": "ready"}

    return router
