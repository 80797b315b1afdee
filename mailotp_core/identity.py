"""
Identity Utilities
==================
Email address validation and masking for OTP identities.
"""

import re
from typing import Optional

# Same shape check the browser client applies: something@something.tld
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MAX_EMAIL_LENGTH = 254


def normalize_identity(value: Optional[str]) -> str:
    """
    Strip surrounding whitespace.

    Case is preserved; identities are matched exactly.
    """
    if value is None:
        return ""
    return value.strip()


def validate_email(email: str) -> bool:
    """
    Check that a string looks like an email address.

    Args:
        email: Candidate address

    Returns:
        True if it has the local@domain.tld shape
    """
    if not email or len(email) > MAX_EMAIL_LENGTH:
        return False
    return bool(EMAIL_PATTERN.match(email))


def mask_identity(identity: str) -> str:
    """
    Mask an email address for logs.

    ``alice@example.com`` becomes ``a***@example.com``.
    """
    local, sep, domain = identity.partition("@")
    if not sep:
        return identity[:1] + "***"
    return f"{local[:1]}***@{domain}"
