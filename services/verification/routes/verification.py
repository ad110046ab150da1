"""
Human Verification Routes
=========================

Relay endpoint that validates a World ID proof with the verification
authority and issues a verification record.
"""

import math
from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from shared.config import settings
from shared.logging import bind_context, get_logger
from shared.models.common import ErrorResponse
from shared.ratelimit import RateLimiter, get_rate_limiter
from shared.worldid import (
    InvalidField,
    MissingField,
    Rejected,
    TransportError,
    VerificationLevel,
    VerificationRecorder,
    VerificationStore,
    WorldIDVerifier,
    get_verification_store,
    get_worldid_verifier,
    validate_payload,
)


logger = get_logger(__name__)
router = APIRouter()

_recorder = VerificationRecorder()


def get_recorder() -> VerificationRecorder:
    """Dependency that provides the record builder."""
    return _recorder


# ============================================================================
# Response Models
# ============================================================================


class HumanVerificationData(BaseModel):
    """Public part of a verification record."""

    verified: bool = True
    unique_human: bool = True
    nullifier_hash: str


class VerifyHumanResponse(BaseModel):
    """Successful verification."""

    success: bool = True
    message: str
    verification_id: str
    timestamp: datetime
    verification_level: VerificationLevel
    data: HumanVerificationData


def _error(
    status_code: int,
    message: str,
    error_code: str | None = None,
    headers: dict[str, str] | None = None,
    **extra: Any,
) -> JSONResponse:
    body = ErrorResponse(message=message, error_code=error_code, **extra)
    return JSONResponse(status_code=status_code, content=body.to_content(), headers=headers)


def client_key(request: Request) -> str:
    """
    Identify the caller for rate limiting.

    The first X-Forwarded-For hop is used only when the relay is configured
    to trust its proxy.
    """
    if settings.rate_limit.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


# ============================================================================
# Verification Endpoint
# ============================================================================


@router.post(
    "/verify-worldid",
    response_model=VerifyHumanResponse,
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def verify_worldid(
    request: Request,
    verifier: Annotated[WorldIDVerifier, Depends(get_worldid_verifier)],
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    store: Annotated[VerificationStore, Depends(get_verification_store)],
    recorder: Annotated[VerificationRecorder, Depends(get_recorder)],
) -> Any:
    """
    Verify a World ID proof.

    The payload is checked before any upstream call. On success a fresh
    verification record is built and handed to the store; the response
    only carries a truncated nullifier hash.

    Args:
        request: Raw request with JSON body (merkle_root, nullifier_hash,
            proof, verification_level, action)

    Returns:
        VerifyHumanResponse, or an error body with success=false
    """
    client = client_key(request)
    bind_context(client=client)

    limits = settings.rate_limit
    if limits.enabled and not await limiter.allow(client, limits.requests, limits.window_ms):
        return _error(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "Too many verification attempts. Try again later.",
            "RATE_LIMITED",
            headers={"Retry-After": str(math.ceil(limits.window_ms / 1000))},
        )

    try:
        payload = await request.json()
    except ValueError:
        logger.warning("verification_body_not_json")
        return _error(
            status.HTTP_400_BAD_REQUEST,
            "Request body must be a JSON object",
            "INVALID_BODY",
        )

    if not isinstance(payload, dict):
        logger.warning("verification_body_not_object", body_type=type(payload).__name__)
        return _error(
            status.HTTP_400_BAD_REQUEST,
            "Request body must be a JSON object",
            "INVALID_BODY",
        )

    validated = validate_payload(
        payload,
        enforce_hash_format=settings.worldid.enforce_hash_format,
    )

    if isinstance(validated, MissingField):
        logger.warning("verification_missing_fields", fields=list(validated.fields))
        return _error(
            status.HTTP_400_BAD_REQUEST,
            validated.message,
            "MISSING_FIELDS",
            missing_fields=list(validated.fields),
        )
    if isinstance(validated, InvalidField):
        logger.warning("verification_invalid_field", field=validated.field, reason=validated.reason)
        return _error(status.HTTP_400_BAD_REQUEST, validated.message, "INVALID_FIELD")

    outcome = await verifier.verify(validated)

    if isinstance(outcome, Rejected):
        return _error(status.HTTP_400_BAD_REQUEST, outcome.reason, outcome.code)

    if isinstance(outcome, TransportError):
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Verification authority unavailable",
            error=outcome.reason if settings.expose_error_details else None,
        )

    record = recorder.record(outcome)

    try:
        stored = await store.store(record)
    except Exception as e:
        logger.error(
            "verification_store_failed",
            verification_id=record.verification_id,
            error=str(e),
            error_type=type(e).__name__,
        )
    else:
        if not stored:
            logger.error("verification_store_rejected", verification_id=record.verification_id)

    logger.info(
        "verification_succeeded",
        verification_id=record.verification_id,
        verification_level=record.verification_level.value,
        action=record.action,
    )

    return VerifyHumanResponse(
        message="Verification successful",
        verification_id=record.verification_id,
        timestamp=record.timestamp,
        verification_level=record.verification_level,
        data=HumanVerificationData(nullifier_hash=record.nullifier_preview),
    )
