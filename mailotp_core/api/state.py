"""
Service State
=============
Objects owned by one application instance.
"""

from dataclasses import dataclass
from fastapi import Request

from mailotp_core.config import Settings
from mailotp_core.mail import BaseMailDispatcher
from mailotp_core.metrics import SimpleMetrics
from mailotp_core.otp import OTPStore
from mailotp_core.rate_limit import InMemoryRateLimiter


@dataclass
class ServiceState:
    settings: Settings
    store: OTPStore
    dispatcher: BaseMailDispatcher
    limiter: InMemoryRateLimiter
    metrics: SimpleMetrics


def get_state(request: Request) -> ServiceState:
    return request.app.state.otp
