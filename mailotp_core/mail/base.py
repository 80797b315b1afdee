"""
Mail Dispatcher Base
====================
Interface shared by every way of delivering an OTP to its recipient.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import structlog

logger = structlog.get_logger(__name__)


@dataclass
class DispatchResult:
    """Result of a mail send operation."""
    success: bool
    dispatcher: str
    transport: Optional[str] = None
    error_message: Optional[str] = None


class BaseMailDispatcher(ABC):
    """
    Abstract base class for OTP mail dispatchers.

    A dispatcher never raises for delivery problems; it reports them in the
    returned DispatchResult so the issued code stays valid.
    """

    name: str = "base"

    def __init__(self):
        self._is_initialized = False

    @property
    def enabled(self) -> bool:
        """Whether messages actually leave the process."""
        return False

    async def initialize(self) -> None:
        """Initialize the dispatcher (e.g., probe connections)."""
        self._is_initialized = True
        logger.info("Mail dispatcher initialized", dispatcher=self.name)

    async def close(self) -> None:
        """Clean up resources."""
        self._is_initialized = False
        logger.info("Mail dispatcher closed", dispatcher=self.name)

    @abstractmethod
    async def send(self, to: str, code: str, expires_at: datetime) -> DispatchResult:
        """
        Deliver a code.

        Args:
            to: Recipient email address
            code: The OTP
            expires_at: When the code stops being valid

        Returns:
            DispatchResult
        """
        pass

    async def health_check(self) -> bool:
        return self._is_initialized
