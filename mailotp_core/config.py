"""
Service Configuration
=====================
Settings read from environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from mailotp_core.errors import ConfigurationError

PRODUCTION_ENVIRONMENTS = ("production", "prod")


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _get_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _first(env: Mapping[str, str], *names: str) -> str:
    for name in names:
        value = env.get(name)
        if value:
            return value
    return ""


@dataclass
class Settings:
    """Configuration for the OTP service."""
    service_name: str = "mailotp"
    environment: str = "development"
    log_level: str = "INFO"
    log_json: bool = False

    # SMTP
    smtp_host: str = "smtp.gmail.com"
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from: str = ""
    smtp_timeout: float = 10.0

    # Issuance rate limit per client
    otp_rate_limit: int = 5
    otp_rate_window: int = 60

    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    host: str = "0.0.0.0"
    port: int = 3000

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in PRODUCTION_ENVIRONMENTS

    @property
    def smtp_enabled(self) -> bool:
        return bool(self.smtp_user and self.smtp_password)

    @property
    def sender(self) -> str:
        return self.smtp_from or self.smtp_user

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        ``GMAIL_USER`` and ``GMAIL_APP_PASSWORD`` are accepted as fallbacks
        for ``SMTP_USER`` and ``SMTP_PASSWORD``.
        """
        env = os.environ if env is None else env
        environment = env.get("ENVIRONMENT") or env.get("NODE_ENV") or "development"
        is_production = environment.lower() in PRODUCTION_ENVIRONMENTS

        origins = env.get("CORS_ORIGINS", "*")
        cors_origins = [o.strip() for o in origins.split(",") if o.strip()] or ["*"]

        settings = cls(
            service_name=env.get("SERVICE_NAME", "mailotp"),
            environment=environment,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            log_json=_get_bool(env, "LOG_JSON", is_production),
            smtp_host=env.get("SMTP_HOST", "smtp.gmail.com"),
            smtp_user=_first(env, "SMTP_USER", "GMAIL_USER"),
            smtp_password=_first(env, "SMTP_PASSWORD", "GMAIL_APP_PASSWORD"),
            smtp_from=env.get("SMTP_FROM", ""),
            smtp_timeout=float(_get_int(env, "SMTP_TIMEOUT", 10)),
            otp_rate_limit=_get_int(env, "OTP_RATE_LIMIT", 5),
            otp_rate_window=_get_int(env, "OTP_RATE_WINDOW", 60),
            cors_origins=cors_origins,
            host=env.get("HOST", "0.0.0.0"),
            port=_get_int(env, "PORT", 3000),
        )

        if settings.otp_rate_limit < 1 or settings.otp_rate_window < 1:
            raise ConfigurationError("OTP_RATE_LIMIT and OTP_RATE_WINDOW must be positive")

        return settings
