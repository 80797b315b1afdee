"""
OTP Routes
==========
Issue and verify endpoints plus the development listing of live codes.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse
import structlog

from mailotp_core.errors import UserErrors, error_body
from mailotp_core.identity import mask_identity, normalize_identity, validate_email
from mailotp_core.metrics import MetricNames
from mailotp_core.otp import VerificationStatus
from .schemas import (
    DebugOTPEntry,
    DebugOTPList,
    SendOTPDebug,
    SendOTPRequest,
    SendOTPResponse,
    VerifyOTPRequest,
    VerifyOTPResponse,
)
from .state import ServiceState, get_state

logger = structlog.get_logger(__name__)

# Caller-facing text and code per failed verification outcome
VERIFICATION_ERRORS = {
    VerificationStatus.NOT_FOUND: (
        "No OTP found for this email. Please request a new OTP.",
        "OTP_NOT_FOUND",
    ),
    VerificationStatus.EXPIRED: (
        "OTP has expired. Please request a new one.",
        "OTP_EXPIRED",
    ),
    VerificationStatus.ATTEMPTS_EXHAUSTED: (
        "Maximum OTP attempts exceeded. Please request a new OTP.",
        "OTP_ATTEMPTS_EXHAUSTED",
    ),
    VerificationStatus.INVALID: (
        "Invalid OTP",
        "OTP_INVALID",
    ),
}


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def enforce_issue_rate_limit(
    request: Request,
    state: ServiceState = Depends(get_state),
) -> None:
    """Cap issuance requests per client address."""
    key = state.limiter.get_key_pattern("send-otp", client_key(request))
    info = state.limiter.check(key)
    if not info.allowed:
        state.metrics.increment(MetricNames.RATE_LIMIT_HITS)
        raise UserErrors.rate_limited(
            headers=info.headers(),
            log_detail=f"send-otp limit reached for {client_key(request)}",
        )


router = APIRouter(prefix="/api", tags=["OTP"])


@router.post(
    "/send-otp",
    response_model=SendOTPResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(enforce_issue_rate_limit)],
)
async def send_otp(
    body: SendOTPRequest,
    state: ServiceState = Depends(get_state),
) -> SendOTPResponse:
    """Issue a code for an email address and mail it."""
    email = normalize_identity(body.email)
    if not email:
        raise UserErrors.invalid_request("Email is required")
    if not validate_email(email):
        raise UserErrors.invalid_request("Invalid email format")

    record = state.store.issue(email)
    state.metrics.increment(MetricNames.OTP_ISSUED)

    # The record already exists; a failed send leaves it valid
    result = await state.dispatcher.send(email, record.code, record.expires_at)
    state.metrics.increment(
        MetricNames.MAIL_DISPATCH,
        labels={"dispatcher": result.dispatcher, "success": str(result.success).lower()},
    )

    response = SendOTPResponse(
        message="OTP sent to your email" if result.success else "OTP generated (check server console)",
        email=email,
        expires_at=record.expires_at,
    )
    if not state.settings.is_production:
        response.debug = SendOTPDebug(
            otp=record.code,
            expires_in=record.expires_in(state.store.now()),
            email_sent=result.success,
            email_error=result.error_message,
        )
    return response


@router.post(
    "/verify-otp",
    response_model=VerifyOTPResponse,
    responses={400: {"description": "Verification failed"}},
)
async def verify_otp(
    body: VerifyOTPRequest,
    state: ServiceState = Depends(get_state),
):
    """Check a submitted code and hand back a proof token on success."""
    email = normalize_identity(body.email)
    otp = (body.otp or "").strip()
    if not email or not otp:
        raise UserErrors.invalid_request("Email and OTP are required")

    result = state.store.verify(email, otp)
    state.metrics.increment(
        MetricNames.OTP_VERIFICATIONS,
        labels={"status": result.status.value},
    )

    if result.success:
        return VerifyOTPResponse(message="OTP verified successfully!", token=result.proof_token)

    message, code = VERIFICATION_ERRORS[result.status]
    extra = {}
    if result.status == VerificationStatus.INVALID:
        extra["remaining_attempts"] = result.remaining_attempts

    logger.info("Verification rejected", identity=mask_identity(email), code=code)
    return JSONResponse(status_code=400, content=error_body(message, code, **extra))


@router.get("/debug/otps", response_model=DebugOTPList)
async def list_otps(state: ServiceState = Depends(get_state)) -> DebugOTPList:
    """Live codes, for local testing only."""
    if state.settings.is_production:
        raise UserErrors.not_found()

    now = state.store.now()
    otps = [
        DebugOTPEntry(
            email=record.identity,
            otp=record.code,
            expires_in=record.expires_in(now),
            attempts=record.attempts,
        )
        for record in state.store.snapshot()
    ]
    return DebugOTPList(count=len(otps), otps=otps)


metrics_router = APIRouter(tags=["Metrics"])


@metrics_router.get("/metrics", response_class=PlainTextResponse)
async def metrics(state: ServiceState = Depends(get_state)) -> str:
    """Prometheus text exposition."""
    state.metrics.set_gauge(MetricNames.OTP_LIVE_RECORDS, len(state.store))
    return state.metrics.export_prometheus()
