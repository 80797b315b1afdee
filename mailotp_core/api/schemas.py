"""
API Schemas
===========
Request and response bodies for the OTP endpoints.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel


class SendOTPRequest(BaseModel):
    email: Optional[str] = None


class VerifyOTPRequest(BaseModel):
    email: Optional[str] = None
    otp: Optional[str] = None


class SendOTPDebug(BaseModel):
    """Extra detail returned outside production."""
    otp: str
    expires_in: int
    email_sent: bool
    email_error: Optional[str] = None


class SendOTPResponse(BaseModel):
    success: bool = True
    message: str
    email: str
    expires_at: datetime
    debug: Optional[SendOTPDebug] = None


class VerifyOTPResponse(BaseModel):
    success: bool = True
    message: str
    token: str


class DebugOTPEntry(BaseModel):
    email: str
    otp: str
    expires_in: int
    attempts: int


class DebugOTPList(BaseModel):
    count: int
    otps: List[DebugOTPEntry]
