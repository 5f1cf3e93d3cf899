"""Response envelope shared by every endpoint."""

from typing import Any
from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field
from starlette.requests import Request

from utils.timezone import now_utc


class APIError(BaseModel):
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Message shown to the operator")


class APIMeta(BaseModel):
    timestamp: datetime = Field(..., description="Response timestamp (UTC)")
    request_id: str = Field(..., description="Same value as the X-Request-ID header")
    selection: dict[str, Any] | None = Field(None, description="Parameters the data was fetched for")
    stale: bool = Field(False, description="A newer selection was issued; data was discarded")


class APIResponse(BaseModel):
    """
    Envelope for every API response, success or failure.

    Money inside ``data`` is Decimal and serializes as an exact string
    ("40.10"), never a float.
    """

    success: bool
    data: Any | None = None
    error: APIError | None = None
    meta: APIMeta


def request_id_of(request: Request) -> str | None:
    """Request ID assigned by RequestIDMiddleware, if it ran."""
    return getattr(request.state, "request_id", None)


def _meta(request_id: str | None, **extra) -> APIMeta:
    return APIMeta(timestamp=now_utc(), request_id=request_id or str(uuid4()), **extra)


def success_response(
    data: Any,
    request_id: str | None = None,
    selection: dict[str, Any] | None = None,
    stale: bool = False,
) -> APIResponse:
    return APIResponse(
        success=True,
        data=data,
        meta=_meta(request_id, selection=selection, stale=stale),
    )


def error_response(code: str, message: str, request_id: str | None = None) -> APIResponse:
    return APIResponse(
        success=False,
        error=APIError(code=code, message=message),
        meta=_meta(request_id),
    )


class ErrorCodes:
    """Error codes the POS client switches on."""

    # Session
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    INVALID_TOKEN = "INVALID_TOKEN"
    FORBIDDEN = "FORBIDDEN"

    # Sale form / catalog input
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    NOT_FOUND = "NOT_FOUND"

    # Store
    WRITE_FAILED = "WRITE_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
