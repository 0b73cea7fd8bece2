"""
app/api/dependencies.py

Shared FastAPI dependencies for upload validation and the rate/identity gate.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import File, Header, HTTPException, Request, Response, UploadFile, status

from app.config import get_ingestion_settings, get_rate_gate_settings
from app.domain.price_batch import RawBatch
from app.gate.rate_limiter import RateDecision, SlidingWindowRateLimiter
from app.logging_utils import log_event
from db.models.project import Project

logger = logging.getLogger(__name__)

_FORWARDED_IP_HEADERS = ("cf-connecting-ip", "x-forwarded-for", "x-real-ip")
_UNKNOWN_CLIENT = "unknown"
OWNER_ID_MAX_LENGTH: int = Project.__table__.c.owner_id.type.length


@lru_cache(maxsize=1)
def get_upload_rate_limiter() -> SlidingWindowRateLimiter:
    """
    Return the process-wide limiter for upload requests.
    """

    return SlidingWindowRateLimiter(window_seconds=get_rate_gate_settings().window_seconds)


def client_ip(request: Request) -> str:
    """
    Best-effort caller address, preferring proxy-supplied headers.
    """

    for header_name in _FORWARDED_IP_HEADERS:
        value = (request.headers.get(header_name) or "").strip()
        if value:
            # x-forwarded-for carries a chain; the first entry is the client.
            return value.split(",")[0].strip() or _UNKNOWN_CLIENT
    if request.client is not None and request.client.host:
        return request.client.host
    return _UNKNOWN_CLIENT


def _apply_rate_headers(response: Response, decision: RateDecision) -> None:
    response.headers["X-RateLimit-Limit"] = str(decision.limit)
    response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
    response.headers["X-RateLimit-Reset"] = str(decision.reset_seconds)


def _throttled(decision: RateDecision) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail={
            "code": "rate_limited",
            "message": "Too many uploads. Try again later.",
            "retryable": True,
        },
        headers={
            "Retry-After": str(decision.reset_seconds),
            "X-RateLimit-Limit": str(decision.limit),
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": str(decision.reset_seconds),
        },
    )


def require_upload_identity(
    request: Request,
    response: Response,
    x_owner_id: str | None = Header(default=None, alias="X-Owner-Id"),
) -> str:
    """
    Rate-limit the caller, then require an owner identity.

    Anonymous callers, and callers with an overlong owner id, are counted by
    IP so that a flood of such requests is throttled before it is refused.
    """

    settings = get_rate_gate_settings()
    owner_id = (x_owner_id or "").strip()
    well_formed = bool(owner_id) and len(owner_id) <= OWNER_ID_MAX_LENGTH

    if settings.enabled:
        if well_formed:
            key = f"owner:{owner_id}"
            limit = settings.authenticated_limit
        else:
            key = f"ip:{client_ip(request)}"
            limit = settings.anonymous_limit

        decision = get_upload_rate_limiter().check(key, limit)
        if not decision.allowed:
            log_event(
                logger,
                logging.WARNING,
                "upload_rate_limited",
                key=key,
                limit=decision.limit,
                retry_after=decision.reset_seconds,
            )
            raise _throttled(decision)
        _apply_rate_headers(response, decision)

    if not owner_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "code": "authentication_required",
                "message": "X-Owner-Id header is required for uploads.",
                "retryable": False,
            },
        )
    if not well_formed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "code": "invalid_owner_id",
                "message": f"X-Owner-Id must be at most {OWNER_ID_MAX_LENGTH} characters.",
                "retryable": False,
            },
        )
    return owner_id


def get_price_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the upload has a file name; the type check happens downstream.
    """

    if not (file.filename or "").strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file must have a file name.",
        )
    return file


def read_raw_batch(file: UploadFile) -> RawBatch:
    """
    Read the upload into memory, refusing bodies over the configured cap.
    """

    max_bytes = get_ingestion_settings().max_upload_bytes
    content = file.file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail={
                "code": "file_too_large",
                "message": f"Uploaded file exceeds {max_bytes} bytes.",
                "retryable": False,
            },
        )
    return RawBatch(content=content, file_name=(file.filename or "").strip())
