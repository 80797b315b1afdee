"""
OTP Code Utilities
==================
Generation and comparison of OTP codes and proof tokens.
"""

import secrets
import hmac
from typing import Callable


def generate_otp(length: int = 6, randbelow: Callable[[int], int] = secrets.randbelow) -> str:
    """
    Generate a random numeric OTP.

    The code is drawn uniformly from ``[10**(length-1), 10**length - 1]``,
    so it always has exactly ``length`` digits and never starts with 0.

    Args:
        length: Number of digits
        randbelow: Source of randomness, ``randbelow(n)`` returns 0 <= x < n

    Returns:
        OTP string
    """
    if length < 1:
        raise ValueError("length must be at least 1")

    low = 10 ** (length - 1)
    high = 10 ** length - 1

    otp = low + randbelow(high - low + 1)
    return str(otp)


def generate_proof_token(nbytes: int = 32, token_hex: Callable[[int], str] = secrets.token_hex) -> str:
    """
    Generate an opaque proof-of-verification token.

    Args:
        nbytes: Bytes of randomness
        token_hex: Source of randomness returning a hex string

    Returns:
        Hex-encoded token (2 * nbytes characters)
    """
    return token_hex(nbytes)


def codes_match(expected: str, submitted: str) -> bool:
    """
    Compare two codes exactly, in constant time.

    Returns False for non-ASCII input instead of raising.
    """
    try:
        return hmac.compare_digest(expected.encode("ascii"), submitted.encode("ascii"))
    except UnicodeEncodeError:
        return False
