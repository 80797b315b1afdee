"""
OTP Store
=========
In-memory OTP lifecycle: issuance, lazy expiry, attempt tracking and
verification.
"""

import threading
from datetime import datetime, timezone, timedelta
from typing import Callable, Dict, List, Optional
import secrets
import structlog

from mailotp_core.identity import mask_identity
from .models import OTPConfig, OTPRecord, VerificationResult
from .codes import generate_otp, generate_proof_token, codes_match

logger = structlog.get_logger(__name__)

DEFAULT_LOCK_STRIPES = 64


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OTPStore:
    """
    Holds at most one OTP record per identity.

    Identities are exact-match, case-sensitive keys. Records past their
    expiry stay in memory until the next ``verify``/``issue`` for the same
    identity or an explicit ``purge_expired``; there is no background sweep.

    Concurrency: each identity maps onto one of a fixed pool of locks, and
    every read-check-mutate sequence for an identity runs under that lock.
    Different identities only contend when they share a stripe.
    """

    def __init__(
        self,
        config: Optional[OTPConfig] = None,
        clock: Callable[[], datetime] = utcnow,
        randbelow: Callable[[int], int] = secrets.randbelow,
        token_hex: Callable[[int], str] = secrets.token_hex,
        lock_stripes: int = DEFAULT_LOCK_STRIPES,
    ):
        """
        Args:
            config: Code length, validity window and attempt budget
            clock: Returns the current timezone-aware time
            randbelow: Randomness for code generation
            token_hex: Randomness for proof tokens
            lock_stripes: Size of the lock pool
        """
        if lock_stripes < 1:
            raise ValueError("lock_stripes must be at least 1")
        self.config = config or OTPConfig()
        self._clock = clock
        self._randbelow = randbelow
        self._token_hex = token_hex
        self._records: Dict[str, OTPRecord] = {}
        self._locks = [threading.Lock() for _ in range(lock_stripes)]

    def _lock_for(self, identity: str) -> threading.Lock:
        return self._locks[hash(identity) % len(self._locks)]

    def now(self) -> datetime:
        return self._clock()

    def issue(self, identity: str) -> OTPRecord:
        """
        Issue a fresh code for an identity, replacing any existing record.

        Args:
            identity: Already validated identity (email address)

        Returns:
            A copy of the new record
        """
        if not identity:
            raise ValueError("identity must be a non-empty string")

        code = generate_otp(self.config.length, randbelow=self._randbelow)

        with self._lock_for(identity):
            now = self._clock()
            record = OTPRecord(
                identity=identity,
                code=code,
                created_at=now,
                expires_at=now + timedelta(seconds=self.config.expiry_seconds),
            )
            replaced = self._records.get(identity) is not None
            self._records[identity] = record
            issued = record.copy()

        logger.info(
            "OTP issued",
            identity=mask_identity(identity),
            expires_in=self.config.expiry_seconds,
            replaced=replaced,
        )
        return issued

    def verify(self, identity: str, submitted_code: str) -> VerificationResult:
        """
        Verify a submitted code.

        Checks run in a fixed order: expiry, then the attempt budget, then
        the code itself. Every terminal outcome deletes the record.

        Args:
            identity: Identity the code was issued for
            submitted_code: User-provided code

        Returns:
            VerificationResult
        """
        max_attempts = self.config.max_attempts

        with self._lock_for(identity):
            record = self._records.get(identity)

            if record is None:
                result = VerificationResult.not_found()

            elif record.is_expired(self._clock()):
                del self._records[identity]
                result = VerificationResult.expired()

            elif record.attempts >= max_attempts:
                del self._records[identity]
                result = VerificationResult.attempts_exhausted()

            elif codes_match(record.code, submitted_code):
                del self._records[identity]
                result = VerificationResult.succeeded(
                    generate_proof_token(self.config.proof_token_bytes, token_hex=self._token_hex)
                )

            else:
                record.attempts += 1
                if record.attempts >= max_attempts:
                    del self._records[identity]
                result = VerificationResult.invalid(max(0, max_attempts - record.attempts))

        self._log_result(identity, result)
        return result

    def _log_result(self, identity: str, result: VerificationResult) -> None:
        masked = mask_identity(identity)
        if result.success:
            logger.info("OTP verified successfully", identity=masked)
        else:
            logger.warning(
                "OTP verification failed",
                identity=masked,
                status=result.status.value,
                remaining=result.remaining_attempts,
            )

    def get(self, identity: str) -> Optional[OTPRecord]:
        """Look up a record without applying expiry."""
        with self._lock_for(identity):
            record = self._records.get(identity)
            return record.copy() if record is not None else None

    def snapshot(self) -> List[OTPRecord]:
        """Copies of every record currently held, expired or not."""
        records = []
        for identity in list(self._records):
            record = self.get(identity)
            if record is not None:
                records.append(record)
        return records

    def purge_expired(self) -> int:
        """
        Delete every record past its expiry.

        Returns:
            Number of records removed
        """
        removed = 0
        for identity in list(self._records):
            with self._lock_for(identity):
                record = self._records.get(identity)
                if record is not None and record.is_expired(self._clock()):
                    del self._records[identity]
                    removed += 1

        if removed:
            logger.info("Expired OTPs purged", count=removed)
        return removed

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, identity: str) -> bool:
        return identity in self._records
