"""
OTP Email Templates
===================
Builds the verification email in plain text and HTML.
"""

from datetime import datetime, timezone
from email.message import EmailMessage
from typing import Optional

SUBJECT = "Your OTP Verification Code"

TEXT_TEMPLATE = (
    "Your OTP verification code is: {code}\n\n"
    "This code will expire in {minutes} minutes.\n\n"
    "If you didn't request this code, please ignore this email."
)

HTML_TEMPLATE = """\
<div style="font-family: Arial, sans-serif; padding: 20px;">
  <h2>Your OTP Verification Code</h2>
  <p>Use this code to verify your email:</p>
  <div style="font-size: 36px; font-weight: bold; letter-spacing: 10px; color: #333; margin: 20px 0; padding: 20px; background: #f5f5f5; border-radius: 10px; text-align: center;">
    {code}
  </div>
  <p>This code will expire in {minutes} minutes.</p>
  <p style="color: #666; font-size: 14px; margin-top: 30px;">
    If you didn't request this code, please ignore this email.
  </p>
</div>
"""


def minutes_until(expires_at: datetime, now: Optional[datetime] = None) -> int:
    """Whole minutes left before expiry, rounded up, at least 1."""
    now = now or datetime.now(timezone.utc)
    seconds = (expires_at - now).total_seconds()
    return max(1, int(-(-seconds // 60)))


def build_otp_message(
    sender: str,
    to: str,
    code: str,
    expires_at: datetime,
    now: Optional[datetime] = None,
) -> EmailMessage:
    """
    Build the OTP email.

    Args:
        sender: From address
        to: Recipient address
        code: The OTP
        expires_at: Expiry shown to the recipient
        now: Reference time for the "expires in" text

    Returns:
        A multipart/alternative EmailMessage
    """
    minutes = minutes_until(expires_at, now)

    message = EmailMessage()
    message["Subject"] = SUBJECT
    message["From"] = sender
    message["To"] = to
    message.set_content(TEXT_TEMPLATE.format(code=code, minutes=minutes))
    message.add_alternative(HTML_TEMPLATE.format(code=code, minutes=minutes), subtype="html")
    return message
