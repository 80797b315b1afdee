"""
Rate Limiting
=============
Per-caller request limits applied before OTP issuance.
"""

from .models import RateLimitResult, RateLimitInfo
from .in_memory import InMemoryRateLimiter

__all__ = [
    "RateLimitResult",
    "RateLimitInfo",
    "InMemoryRateLimiter",
]
