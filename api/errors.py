"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from api.base import error_response, request_id_of, ErrorCodes
from auth.exceptions import InvalidTokenError, NotAuthorizedError
from core.exceptions import NotFoundError, ValidationError, WriteError

logger = logging.getLogger(__name__)


def _error(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(code, message, request_id_of(request)).model_dump(mode="json"),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(ValidationError)
    async def business_validation_handler(request: Request, exc: ValidationError):
        return _error(request, 400, ErrorCodes.VALIDATION_ERROR, str(exc))

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(request, 404, ErrorCodes.NOT_FOUND, str(exc))

    @app.exception_handler(WriteError)
    async def write_error_handler(request: Request, exc: WriteError):
        logger.error(f"Write failed: {exc}")
        return _error(request, 503, ErrorCodes.WRITE_FAILED, "Could not save, please try again")

    @app.exception_handler(NotAuthorizedError)
    async def not_authorized_handler(request: Request, exc: NotAuthorizedError):
        return _error(request, 403, ErrorCodes.FORBIDDEN, str(exc))

    @app.exception_handler(InvalidTokenError)
    async def invalid_token_handler(request: Request, exc: InvalidTokenError):
        return _error(request, 401, ErrorCodes.INVALID_TOKEN, "Invalid or expired token")

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return _error(request, 400, ErrorCodes.INVALID_REQUEST, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error(request, 422, ErrorCodes.VALIDATION_ERROR, str(exc.errors()))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return _error(request, 500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
