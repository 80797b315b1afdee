"""
Application Factory
===================
Builds the FastAPI app that fronts the OTP store.

Usage:
    from mailotp_core.api import create_app

    app = create_app()
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from mailotp_core import __version__
from mailotp_core.config import Settings
from mailotp_core.errors import http_exception_handler, validation_exception_handler
from mailotp_core.mail import BaseMailDispatcher, create_dispatcher
from mailotp_core.metrics import MetricLabels, SimpleMetrics
from mailotp_core.otp import OTPStore
from mailotp_core.rate_limit import InMemoryRateLimiter
from .health import create_health_router
from .middleware import RequestLoggingMiddleware, SanitizedErrorMiddleware, SecurityHeadersMiddleware
from .routes import metrics_router, router
from .state import ServiceState

logger = structlog.get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[OTPStore] = None,
    dispatcher: Optional[BaseMailDispatcher] = None,
    limiter: Optional[InMemoryRateLimiter] = None,
) -> FastAPI:
    """
    Create the OTP service.

    Args:
        settings: Service settings, read from the environment if omitted
        store: OTP store, a fresh one if omitted
        dispatcher: Mail dispatcher, chosen from settings if omitted
        limiter: Issuance rate limiter, built from settings if omitted

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = Settings.from_env()
    # An empty store is falsy, so test for None explicitly
    if store is None:
        store = OTPStore()
    if dispatcher is None:
        dispatcher = create_dispatcher(settings)
    if limiter is None:
        limiter = InMemoryRateLimiter(
            rate=settings.otp_rate_limit,
            window=settings.otp_rate_window,
        )

    state = ServiceState(
        settings=settings,
        store=store,
        dispatcher=dispatcher,
        limiter=limiter,
        metrics=SimpleMetrics(MetricLabels(service=settings.service_name, environment=settings.environment)),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await dispatcher.initialize()
        logger.info(
            "Service started",
            service=settings.service_name,
            environment=settings.environment,
            mail_enabled=dispatcher.enabled,
        )
        try:
            yield
        finally:
            await dispatcher.close()

    app = FastAPI(
        title=settings.service_name,
        version=__version__,
        lifespan=lifespan,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
    )
    app.state.otp = state

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Last added runs first
    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.is_production)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_middleware(SanitizedErrorMiddleware, production=settings.is_production)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(router)
    app.include_router(metrics_router)
    app.include_router(
        create_health_router(settings.service_name, store, dispatcher, version=__version__)
    )

    return app
