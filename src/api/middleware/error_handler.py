"""Global exception handlers producing the error envelope.

Status mapping:

- ValidationError, RequestValidationError -> 400
- UnauthorizedError and its token subclasses -> 401
- NotFoundError, unknown routes -> 404
- ConflictError -> 409
- RateLimitExceeded -> 429
- InternalError and every unexpected exception -> 500

Server errors never expose their cause. They carry a fresh ``errorId``,
distinct from the request ID, that is logged together with the traceback.
"""

import traceback
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException

from src.api.constants import (
    MSG_INTERNAL_ERROR,
    MSG_NOT_FOUND,
    MSG_RATE_LIMITED,
    MSG_VALIDATION_FAILED,
)
from src.api.utils.responses import error_response
from src.core.config import get_settings
from src.core.context import RequestContext, generate_error_id
from src.core.error_context import sanitize_error_context
from src.core.exceptions import (
    ConflictError,
    ErrorCode,
    InternalError,
    LedgerlyError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

STATUS_BY_ERROR: tuple[tuple[type[LedgerlyError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (InternalError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(exc: LedgerlyError) -> int:
    """HTTP status code for an application error."""
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None) or RequestContext.get_request_id()


def _internal_error_response(
    request: Request, exc: BaseException, error_id: str
) -> Response:
    settings = getattr(request.app.state, "settings", None) or get_settings()
    debug_info: dict[str, Any] | None = None
    if settings.is_development:
        debug_info = {
            "exceptionType": type(exc).__name__,
            "message": str(exc),
            "stackTrace": traceback.format_tb(exc.__traceback__),
        }

    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        MSG_INTERNAL_ERROR,
        ErrorCode.INTERNAL_ERROR.value,
        errorId=error_id,
        debugInfo=debug_info,
        request_id=_request_id(request),
    )


async def ledgerly_error_handler(request: Request, exc: Exception) -> Response:
    """Handle LedgerlyError exceptions.

    Raises:
        TypeError: If exc is not a LedgerlyError instance
    """
    if not isinstance(exc, LedgerlyError):
        raise TypeError(f"Expected LedgerlyError, got {type(exc).__name__}")

    status_code = status_for(exc)
    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
            "error_code": exc.error_code,
            "fingerprint": exc.fingerprint,
        },
    )

    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        error_id = generate_error_id()
        logger.opt(exception=exc).error(
            "Internal error {}: {}",
            error_id,
            exc.message,
            error_id=error_id,
            **error_context,
        )
        return _internal_error_response(request, exc, error_id)

    log = logger.warning if isinstance(exc, UnauthorizedError) else logger.info
    log(
        "Request rejected with {}: {}",
        status_code,
        exc.message,
        **error_context,
    )

    return error_response(
        status_code,
        exc.message,
        exc.error_code,
        details=exc.context.get("details"),
        request_id=_request_id(request),
    )


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    details = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ())]
        field = ".".join(location[1:]) or (location[0] if location else "body")
        details.append(
            {
                "field": field,
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type", "value_error"),
            }
        )
    return details


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle FastAPI RequestValidationError exceptions with field details.

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    details = _field_errors(exc)
    logger.info(
        "Request validation failed",
        path=str(request.url.path),
        method=request.method,
        fields=[detail["field"] for detail in details],
    )

    return error_response(
        status.HTTP_400_BAD_REQUEST,
        MSG_VALIDATION_FAILED,
        ErrorCode.VALIDATION_ERROR.value,
        details=details,
        request_id=_request_id(request),
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette HTTPException (unknown routes, wrong methods).

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    if exc.status_code == status.HTTP_404_NOT_FOUND:
        error_code, message = ErrorCode.NOT_FOUND.value, MSG_NOT_FOUND
    elif exc.status_code == status.HTTP_401_UNAUTHORIZED:
        error_code, message = ErrorCode.UNAUTHORIZED.value, str(exc.detail)
    elif exc.status_code == status.HTTP_400_BAD_REQUEST:
        error_code, message = ErrorCode.VALIDATION_ERROR.value, str(exc.detail)
    else:
        error_code, message = "HTTP_ERROR", str(exc.detail)

    logger.info(
        "HTTP exception",
        status_code=exc.status_code,
        method=request.method,
        path=str(request.url.path),
    )

    return error_response(
        exc.status_code,
        message,
        error_code,
        headers=getattr(exc, "headers", None),
        request_id=_request_id(request),
    )


def rate_limit_exceeded_handler(request: Request, exc: Exception) -> Response:
    """Handle slowapi RateLimitExceeded.

    Synchronous on purpose: SlowAPIMiddleware invokes the registered handler
    without awaiting it.
    """
    limit = getattr(exc, "detail", None)
    logger.warning(
        "Rate limit exceeded",
        client_host=request.client.host if request.client else None,
        limit=limit,
    )
    return error_response(
        status.HTTP_429_TOO_MANY_REQUESTS,
        MSG_RATE_LIMITED,
        ErrorCode.RATE_LIMITED.value,
        request_id=_request_id(request),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle exceptions no other handler claimed.

    The client sees only a generic message and the error ID.
    """
    error_id = generate_error_id()
    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
        },
    )

    logger.opt(exception=exc).error(
        "Unhandled exception {}: {}",
        error_id,
        type(exc).__name__,
        error_id=error_id,
        **error_context,
    )

    return _internal_error_response(request, exc, error_id)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""
    app.add_exception_handler(LedgerlyError, ledgerly_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.debug("Exception handlers registered")
