"""
OTP Models
==========
Data models and enums for OTP issuance and verification.
"""

from datetime import datetime
from typing import Optional
from dataclasses import dataclass
from enum import Enum


class VerificationStatus(str, Enum):
    """Outcome of a verification attempt."""
    SUCCESS = "success"
    INVALID = "invalid"
    EXPIRED = "expired"
    ATTEMPTS_EXHAUSTED = "attempts_exhausted"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class OTPConfig:
    """Configuration for OTP issuance."""
    length: int = 6
    expiry_seconds: int = 300  # 5 minutes
    max_attempts: int = 3
    proof_token_bytes: int = 32

    def __post_init__(self):
        if self.length < 1:
            raise ValueError("length must be at least 1")
        if self.expiry_seconds <= 0:
            raise ValueError("expiry_seconds must be positive")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.proof_token_bytes < 16:
            raise ValueError("proof_token_bytes must be at least 16")


@dataclass
class OTPRecord:
    """
    The live OTP for one identity.

    Only ``attempts`` changes after creation; a new code or expiry means a
    new record.
    """
    identity: str
    code: str
    created_at: datetime
    expires_at: datetime
    attempts: int = 0

    def is_expired(self, now: datetime) -> bool:
        # Still valid at exactly expires_at
        return now > self.expires_at

    def expires_in(self, now: datetime) -> int:
        """Whole seconds left before expiry, never negative."""
        return max(0, int((self.expires_at - now).total_seconds()))

    def copy(self) -> "OTPRecord":
        return OTPRecord(
            identity=self.identity,
            code=self.code,
            created_at=self.created_at,
            expires_at=self.expires_at,
            attempts=self.attempts,
        )


@dataclass(frozen=True)
class VerificationResult:
    """Result of ``OTPStore.verify``."""
    status: VerificationStatus
    remaining_attempts: Optional[int] = None
    proof_token: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == VerificationStatus.SUCCESS

    @classmethod
    def not_found(cls) -> "VerificationResult":
        return cls(status=VerificationStatus.NOT_FOUND)

    @classmethod
    def expired(cls) -> "VerificationResult":
        return cls(status=VerificationStatus.EXPIRED)

    @classmethod
    def attempts_exhausted(cls) -> "VerificationResult":
        return cls(status=VerificationStatus.ATTEMPTS_EXHAUSTED, remaining_attempts=0)

    @classmethod
    def invalid(cls, remaining_attempts: int) -> "VerificationResult":
        return cls(status=VerificationStatus.INVALID, remaining_attempts=remaining_attempts)

    @classmethod
    def succeeded(cls, proof_token: str) -> "VerificationResult":
        return cls(status=VerificationStatus.SUCCESS, proof_token=proof_token)
