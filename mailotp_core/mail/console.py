"""
Console Mail Dispatcher
=======================
Writes OTPs to the service log instead of sending them.
"""

from datetime import datetime
import structlog

from mailotp_core.identity import mask_identity
from .base import BaseMailDispatcher, DispatchResult

logger = structlog.get_logger(__name__)


class ConsoleMailDispatcher(BaseMailDispatcher):
    """
    Development dispatcher.

    Logs the code so it can be copied from the server console. Reports
    failure because nothing was delivered.

    With ``reveal_codes`` off (production) only the masked address is
    logged; the code never reaches the log stream.
    """

    name = "console"

    def __init__(self, reveal_codes: bool = True):
        super().__init__()
        self.reveal_codes = reveal_codes

    async def send(self, to: str, code: str, expires_at: datetime) -> DispatchResult:
        if self.reveal_codes:
            logger.info(
                "OTP generated",
                email=to,
                otp=code,
                expires_at=expires_at.isoformat(),
            )
        else:
            logger.warning(
                "OTP not delivered",
                identity=mask_identity(to),
                expires_at=expires_at.isoformat(),
            )
        return DispatchResult(
            success=False,
            dispatcher=self.name,
            error_message="SMTP disabled",
        )
