"""
Mail Dispatch
=============
Delivery of OTP codes to email addresses.
"""

from typing import Optional

from mailotp_core.config import Settings
from .base import BaseMailDispatcher, DispatchResult
from .console import ConsoleMailDispatcher
from .smtp import SMTPMailDispatcher, SMTPTransport, default_transports
from .templates import build_otp_message


def create_dispatcher(settings: Optional[Settings] = None) -> BaseMailDispatcher:
    """
    Pick a dispatcher for the given settings.

    SMTP credentials select the SMTP dispatcher, with the console one as its
    fallback; without credentials the console dispatcher is used directly.
    Codes are written to the console log only outside production.
    """
    settings = settings or Settings.from_env()
    console = ConsoleMailDispatcher(reveal_codes=not settings.is_production)
    if not settings.smtp_enabled:
        return console

    return SMTPMailDispatcher(
        username=settings.smtp_user,
        password=settings.smtp_password,
        sender=settings.sender,
        transports=default_transports(settings.smtp_host),
        timeout=settings.smtp_timeout,
        fallback=console,
    )


__all__ = [
    "BaseMailDispatcher",
    "DispatchResult",
    "ConsoleMailDispatcher",
    "SMTPMailDispatcher",
    "SMTPTransport",
    "default_transports",
    "build_otp_message",
    "create_dispatcher",
]
