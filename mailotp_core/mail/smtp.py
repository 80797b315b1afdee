"""
SMTP Mail Dispatcher
====================
Sends OTP emails over SMTP, trying several transports until one connects.
"""

import asyncio
import smtplib
import ssl
from dataclasses import dataclass
from datetime import datetime
from email.message import EmailMessage
from typing import Callable, List, Optional
import structlog

from mailotp_core.errors import MailDispatchError
from .base import BaseMailDispatcher, DispatchResult
from .templates import build_otp_message

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SMTPTransport:
    """One way of reaching the SMTP server."""
    name: str
    host: str
    port: int
    use_ssl: bool = False
    starttls: bool = False
    # Upgrade only when the server advertises STARTTLS
    opportunistic_tls: bool = False


def default_transports(host: str = "smtp.gmail.com") -> List[SMTPTransport]:
    """Submission over STARTTLS, then implicit TLS, then port 25 upgrading when offered."""
    return [
        SMTPTransport(name="Port 587 (TLS)", host=host, port=587, starttls=True),
        SMTPTransport(name="Port 465 (SSL)", host=host, port=465, use_ssl=True),
        SMTPTransport(name="Port 25", host=host, port=25, opportunistic_tls=True),
    ]


class SMTPMailDispatcher(BaseMailDispatcher):
    """
    SMTP dispatcher with transport fallback.

    ``initialize`` probes the configured transports in order and keeps the
    first one that accepts a login. If none does, sends are handed to the
    fallback dispatcher (normally the console one) and reported as failed.
    Blocking smtplib calls run in a worker thread.
    """

    name = "smtp"

    def __init__(
        self,
        username: str,
        password: str,
        sender: Optional[str] = None,
        transports: Optional[List[SMTPTransport]] = None,
        timeout: float = 10.0,
        fallback: Optional[BaseMailDispatcher] = None,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
        smtp_ssl_factory: Callable[..., smtplib.SMTP_SSL] = smtplib.SMTP_SSL,
    ):
        super().__init__()
        self.username = username
        self.password = password
        self.sender = sender or username
        self.transports = transports if transports is not None else default_transports()
        self.timeout = timeout
        self.fallback = fallback
        self.transport: Optional[SMTPTransport] = None
        self._smtp_factory = smtp_factory
        self._smtp_ssl_factory = smtp_ssl_factory

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)

    @property
    def enabled(self) -> bool:
        return self.transport is not None

    def _connect(self, transport: SMTPTransport) -> smtplib.SMTP:
        """Open an authenticated connection or raise MailDispatchError."""
        context = ssl.create_default_context()
        conn = None
        try:
            if transport.use_ssl:
                conn = self._smtp_ssl_factory(
                    transport.host, transport.port, timeout=self.timeout, context=context
                )
            else:
                conn = self._smtp_factory(transport.host, transport.port, timeout=self.timeout)
                if transport.starttls:
                    conn.starttls(context=context)
                elif transport.opportunistic_tls:
                    conn.ehlo_or_helo_if_needed()
                    if conn.has_extn("starttls"):
                        conn.starttls(context=context)
            conn.login(self.username, self.password)
            return conn
        except (smtplib.SMTPException, OSError) as e:
            if conn is not None:
                self._quit(conn)
            raise MailDispatchError(str(e) or type(e).__name__, transport.name) from e

    @staticmethod
    def _quit(conn: smtplib.SMTP) -> None:
        try:
            conn.quit()
        except (smtplib.SMTPException, OSError):
            conn.close()

    def _select_transport(self) -> Optional[SMTPTransport]:
        for transport in self.transports:
            logger.info("Trying SMTP transport", transport=transport.name)
            try:
                conn = self._connect(transport)
            except MailDispatchError as e:
                logger.warning("SMTP transport failed", transport=transport.name, error=e.message)
                continue
            self._quit(conn)
            logger.info("SMTP connected", transport=transport.name)
            return transport

        logger.error("All SMTP transports failed, using console mode")
        return None

    def _deliver(self, transport: SMTPTransport, message: EmailMessage) -> None:
        conn = self._connect(transport)
        try:
            conn.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise MailDispatchError(str(e) or type(e).__name__, transport.name) from e
        finally:
            self._quit(conn)

    async def initialize(self) -> None:
        if not self.has_credentials:
            logger.warning("SMTP disabled: missing credentials")
            self.transport = None
        else:
            self.transport = await asyncio.to_thread(self._select_transport)

        if self.fallback is not None:
            await self.fallback.initialize()
        await super().initialize()

    async def close(self) -> None:
        if self.fallback is not None:
            await self.fallback.close()
        await super().close()

    async def _fall_back(self, to: str, code: str, expires_at: datetime) -> None:
        if self.fallback is not None:
            await self.fallback.send(to, code, expires_at)

    async def send(self, to: str, code: str, expires_at: datetime) -> DispatchResult:
        transport = self.transport
        if transport is None:
            await self._fall_back(to, code, expires_at)
            return DispatchResult(
                success=False,
                dispatcher=self.name,
                error_message="SMTP disabled",
            )

        message = build_otp_message(self.sender, to, code, expires_at)
        try:
            await asyncio.to_thread(self._deliver, transport, message)
        except MailDispatchError as e:
            logger.error("Email sending failed", transport=transport.name, error=e.message)
            await self._fall_back(to, code, expires_at)
            return DispatchResult(
                success=False,
                dispatcher=self.name,
                transport=transport.name,
                error_message=e.message,
            )

        logger.info("Email sent successfully", transport=transport.name)
        return DispatchResult(success=True, dispatcher=self.name, transport=transport.name)

    async def health_check(self) -> bool:
        return self._is_initialized and self.enabled
