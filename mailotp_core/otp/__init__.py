"""
OTP Issuance and Verification
=============================
One-time passcodes with expiry and brute-force protection.
"""

from .models import OTPConfig, OTPRecord, VerificationResult, VerificationStatus
from .codes import generate_otp, generate_proof_token, codes_match
from .store import OTPStore, utcnow

__all__ = [
    # Models
    "OTPConfig",
    "OTPRecord",
    "VerificationResult",
    "VerificationStatus",
    # Codes
    "generate_otp",
    "generate_proof_token",
    "codes_match",
    # Store
    "OTPStore",
    "utcnow",
]
