"""
Exception handlers - map failures to the uniform error body.

Every error response has the shape ``{success: false, message, errors?}``.
Domain errors carry their own message; anything unexpected becomes a 500
whose detail is only revealed in development.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from firstslot.config.settings import get_settings
from firstslot.domain.exceptions import (
    AlreadyVerifiedError,
    DuplicateError,
    InvalidOtpError,
    RegistrationError,
    SlotsExhaustedError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

_STATUS_CODES: dict[type[RegistrationError], int] = {
    DuplicateError: status.HTTP_400_BAD_REQUEST,
    UserNotFoundError: status.HTTP_404_NOT_FOUND,
    AlreadyVerifiedError: status.HTTP_400_BAD_REQUEST,
    InvalidOtpError: status.HTTP_400_BAD_REQUEST,
    SlotsExhaustedError: status.HTTP_403_FORBIDDEN,
}


def status_code_for(exc: RegistrationError) -> int:
    for exc_type, code in _STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_400_BAD_REQUEST


def error_body(message: str, **extra) -> dict:
    body = {"success": False, "message": message}
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


async def registration_error_handler(request: Request, exc: RegistrationError) -> JSONResponse:
    limit_reached = True if isinstance(exc, SlotsExhaustedError) else None
    return JSONResponse(
        status_code=status_code_for(exc),
        content=error_body(exc.message, limitReached=limit_reached),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder(error_body("Validation failed", errors=errors)),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = "Route not found"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    # Resolve settings the way routes do so dependency overrides apply
    settings_provider = request.app.dependency_overrides.get(get_settings, get_settings)
    settings = settings_provider()
    message = str(exc) if settings.is_development else "Internal server error"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(message),
    )


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RegistrationError, registration_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
