"""Error taxonomy and the single translation from errors to HTTP responses.

Every error leaving the API has the shape ``{"status": <int>, "message": <str>}``.
Internal causes (driver errors, tracebacks) never reach the client: they are
logged here and replaced by a generic message.
"""

import logging
from enum import Enum

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

GENERIC_INTERNAL_MESSAGE = "Internal server error"


class AppError(Exception):
    """Base for errors that map to a client-facing status and message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = GENERIC_INTERNAL_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing fields."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request."


class AuthenticationError(AppError):
    """Bad credentials, or a missing/invalid bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class TokenErrorReason(str, Enum):
    """Why a bearer token was rejected."""

    MALFORMED = "malformed"
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"


_TOKEN_MESSAGES = {
    TokenErrorReason.MALFORMED: "Malformed token",
    TokenErrorReason.INVALID_SIGNATURE: "Invalid token signature",
    TokenErrorReason.EXPIRED: "Token expired",
}


class TokenError(AuthenticationError):
    """A bearer token failed validation; ``reason`` says how."""

    def __init__(self, reason: TokenErrorReason) -> None:
        self.reason = reason
        super().__init__(_TOKEN_MESSAGES[reason])


class AuthorizationError(AppError):
    """Authenticated, but the caller's role is not allowed on this route."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient role for this resource"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class InternalError(AppError):
    """Unexpected failure; the message is always generic."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self) -> None:
        super().__init__(GENERIC_INTERNAL_MESSAGE)


def error_to_status(exc: BaseException) -> int:
    """Map an error to its HTTP status. Anything outside the taxonomy is a 500."""
    if isinstance(exc, AppError):
        return exc.status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(exc: AppError) -> JSONResponse:
    """Build the uniform error body for an application error."""
    code = error_to_status(exc)
    headers = {"WWW-Authenticate": "Bearer"} if code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(
        status_code=code,
        content={"status": code, "message": exc.message},
        headers=headers,
    )


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or ValidationError.default_message


async def _app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
    return error_response(exc)


async def _request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    return error_response(ValidationError(_format_validation_errors(exc)))


async def _http_exception_handler(
    _request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": exc.status_code, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(InternalError())


def register_exception_handlers(app: FastAPI) -> None:
    """Install the translation above as the app's exception handlers."""
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
