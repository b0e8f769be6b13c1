"""
Error taxonomy and global exception handlers.

Every error leaves the API as ``{"success": false, "message": ..., "errors"?: [...]}``
and never carries a stack trace.
"""

from __future__ import annotations

import enum
import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


# ── Error types ─────────────────────────────────────────────────────
class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        errors: list[dict[str, Any]] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.message = message or self.message
        self.errors = errors
        self.headers = headers
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation failed"


class ConflictError(AppError):
    """Duplicate email or generated identifier."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Resource already exists"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Resource not found"


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Server error"


class PasswordHashingError(InternalError):
    message = "Password could not be processed"


class AuthErrorKind(enum.Enum):
    NO_TOKEN = "No token, authorization denied"
    MALFORMED = "Token is not valid"
    EXPIRED = "Token has expired"
    INVALID_ROLE = "Invalid token role"


class AuthError(AppError):
    """The bearer token is missing or cannot be trusted."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, kind: AuthErrorKind) -> None:
        self.kind = kind
        super().__init__(kind.value, headers={"WWW-Authenticate": "Bearer"})


class AccountErrorKind(enum.Enum):
    INVALID_CREDENTIALS = (401, "Invalid credentials")
    INACTIVE = (401, "Token is not valid or account is inactive")
    DEACTIVATED = (401, "Account is deactivated")
    PASSWORD_EXPIRED = (401, "Password has expired. Please reset your password.")
    LOCKED = (423, "Account is temporarily locked due to multiple failed login attempts")

    @property
    def status_code(self) -> int:
        return self.value[0]

    @property
    def message(self) -> str:
        return self.value[1]


class AccountError(AppError):
    """The credentials resolve to an account that may not sign in."""

    def __init__(self, kind: AccountErrorKind) -> None:
        self.kind = kind
        self.status_code = kind.status_code
        super().__init__(kind.message)


class SubscriptionError(AppError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    message = "Subscription is not active"


class AuthorizationErrorKind(enum.Enum):
    UNAUTHENTICATED = (401, "Access denied, no token provided")
    FORBIDDEN = (403, "Access denied, insufficient permissions")


class AuthorizationError(AppError):
    def __init__(self, kind: AuthorizationErrorKind, message: str | None = None) -> None:
        self.kind = kind
        self.status_code = kind.value[0]
        super().__init__(message or kind.value[1])


# ── Handlers ────────────────────────────────────────────────────────
def _error_body(message: str, errors: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body


async def _app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s: %s", type(exc).__name__, exc.message, exc_info=exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.errors),
        headers=exc.headers,
    )


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def _request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = []
    for err in exc.errors():
        # drop the leading "body"/"query" location segment
        loc = [str(p) for p in err.get("loc", ())[1:]]
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": ".".join(loc), "message": message})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("Validation failed", errors),
    )


async def _rate_limit_handler(_request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit exceeded: %s", exc.detail)
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=_error_body("Too many authentication attempts, please try again later."),
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=409,
        content=_error_body("Database constraint violation"),
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content=_error_body("Internal database error"),
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content=_error_body("Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(AppError, _app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
