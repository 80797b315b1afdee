"""
mailotp Core Library
====================
Email one-time passcodes: issuance, verification and the service around
them.
"""

__version__ = "1.0.0"

# OTP
from mailotp_core.otp import (
    generate_otp,
    generate_proof_token,
    OTPConfig,
    OTPRecord,
    OTPStore,
    VerificationResult,
    VerificationStatus,
)

# Identity
from mailotp_core.identity import (
    normalize_identity,
    validate_email,
    mask_identity,
)

# Rate Limiting
from mailotp_core.rate_limit import (
    InMemoryRateLimiter,
    RateLimitInfo,
    RateLimitResult,
)

# Mail
from mailotp_core.mail import (
    BaseMailDispatcher,
    ConsoleMailDispatcher,
    DispatchResult,
    SMTPMailDispatcher,
    SMTPTransport,
    create_dispatcher,
)

# Config
from mailotp_core.config import Settings

# Errors
from mailotp_core.errors import (
    MailotpError,
    ConfigurationError,
    MailDispatchError,
    UserErrors,
)

# Metrics
from mailotp_core.metrics import (
    SimpleMetrics,
    MetricLabels,
    MetricNames,
)

__all__ = [
    # OTP
    "generate_otp",
    "generate_proof_token",
    "OTPConfig",
    "OTPRecord",
    "OTPStore",
    "VerificationResult",
    "VerificationStatus",
    # Identity
    "normalize_identity",
    "validate_email",
    "mask_identity",
    # Rate Limiting
    "InMemoryRateLimiter",
    "RateLimitInfo",
    "RateLimitResult",
    # Mail
    "BaseMailDispatcher",
    "ConsoleMailDispatcher",
    "DispatchResult",
    "SMTPMailDispatcher",
    "SMTPTransport",
    "create_dispatcher",
    # Config
    "Settings",
    # Errors
    "MailotpError",
    "ConfigurationError",
    "MailDispatchError",
    "UserErrors",
    # Metrics
    "SimpleMetrics",
    "MetricLabels",
    "MetricNames",
]
