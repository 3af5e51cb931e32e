"""Application error taxonomy and the FastAPI handlers that render it.

Every business-rule failure raised by the services is an ``AppError``
subclass carrying its HTTP status. None of them are retryable: they describe
bad input, missing data or a denied ownership check. Anything else that
escapes a request is logged and answered with a generic 500 so storage
details never reach the client.
"""
from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

log = structlog.get_logger(__name__)


class AppError(Exception):
    """Base class for expected, caller-facing failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 422
    default_message = "Invalid data"


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Data conflict"


def error_body(message: str, **extra: object) -> dict[str, object]:
    return {"status": "error", "message": message, **extra}


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    log.info(
        "request_rejected",
        path=request.url.path,
        status_code=exc.status_code,
        error=type(exc).__name__,
    )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message),
        headers=headers,
    )


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=error_body("Invalid data", issues=jsonable_encoder(exc.errors())),
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    log.error("unhandled_error", path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)
