"""
Error Types
===========
Exceptions raised by mailotp collaborators and standard HTTP error
responses.

Verification outcomes are not errors; they are returned as
``VerificationResult`` values.
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger(__name__)


class MailotpError(Exception):
    """Base exception for mailotp."""
    pass


class ConfigurationError(MailotpError):
    """Raised when settings cannot be parsed."""
    pass


class MailDispatchError(MailotpError):
    """Raised by a mail transport when a message could not be delivered."""

    def __init__(self, message: str, transport: str = "unknown"):
        self.message = message
        self.transport = transport
        super().__init__(f"[{transport}] {message}")


def error_body(message: str, code: str, **extra: Any) -> Dict[str, Any]:
    """Uniform JSON error body."""
    body = {"success": False, "error": message, "code": code}
    body.update(extra)
    return body


def create_user_error(
    message: str,
    internal_code: str,
    status_code: int = 400,
    log_message: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
) -> HTTPException:
    """
    Create an HTTPException with a uniform body.

    Args:
        message: Message shown to the caller
        internal_code: Stable machine-readable code
        status_code: HTTP status code
        log_message: Technical message for logs
        headers: Extra response headers

    Returns:
        HTTPException carrying the error body as detail
    """
    if log_message:
        logger.warning("user_error", code=internal_code, detail=log_message)

    return HTTPException(
        status_code=status_code,
        detail=error_body(message, internal_code),
        headers=headers,
    )


class UserErrors:
    """Standard user error factory methods."""

    @staticmethod
    def invalid_request(message: str, log_detail: Optional[str] = None) -> HTTPException:
        """Missing or malformed input."""
        return create_user_error(message, "INVALID_REQUEST", 400, log_detail)

    @staticmethod
    def rate_limited(
        headers: Optional[Dict[str, str]] = None,
        log_detail: Optional[str] = None,
    ) -> HTTPException:
        """Rate limit exceeded."""
        return create_user_error(
            "Too many OTP requests. Please try again later.",
            "RATE_LIMITED",
            429,
            log_detail,
            headers=headers,
        )

    @staticmethod
    def not_found(log_detail: Optional[str] = None) -> HTTPException:
        """Endpoint disabled in this environment."""
        return create_user_error("Not found", "NOT_FOUND", 404, log_detail)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render HTTPException details as the response body."""
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = error_body(str(exc.detail), "HTTP_ERROR")
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer malformed request bodies with 400 instead of 422."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        if first.get("type") == "json_invalid":
            message = "Request body is not valid JSON"
        elif first.get("type") == "missing" and field:
            message = f"{field} is required"
        elif field:
            message = f"Invalid {field}"

    logger.info("request_validation_failed", path=request.url.path, message=message)
    return JSONResponse(status_code=400, content=error_body(message, "INVALID_REQUEST"))
