"""
Custom exceptions and error handlers for consistent error responses.

Every error leaves the API in the same envelope as a successful response:
``{"success": false, "message": ..., "error_code": ...}`` plus an
``errors`` list for validation failures.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from jose import JWTError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ValidationError(AppException):
    """Raised when input is well-formed JSON but semantically invalid."""

    def __init__(self, message: str = "Invalid data", errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(
            message=message,
            error_code="ERR_VALIDATION",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"errors": errors or []},
        )


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None, message: Optional[str] = None):
        if message is None:
            message = f"{resource} not found"
            if resource_id is not None:
                message = f"{resource} with ID '{resource_id}' not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id},
        )


class ConflictError(AppException):
    """Raised when a create collides with an existing record."""

    def __init__(self, resource: str, resource_id: Any = None, message: Optional[str] = None):
        if message is None:
            message = f"{resource} already exists"
            if resource_id is not None:
                message = f"{resource} with ID '{resource_id}' already exists"
        super().__init__(
            message=message,
            error_code="ERR_CONFLICT_001",
            status_code=status.HTTP_409_CONFLICT,
            details={"resource": resource, "id": resource_id},
        )


class AuthenticationError(AppException):
    """Raised for authentication failures."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_001",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class InvalidCredentialsError(AuthenticationError):
    """Raised when email or password do not match."""

    def __init__(self):
        super().__init__(message="Invalid credentials")
        self.error_code = "ERR_AUTH_002"


class AccountDisabledError(AppException):
    """Raised when a deactivated user tries to log in or use a session."""

    def __init__(self, message: str = "Your account has been disabled. Please contact support."):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_003",
            status_code=status.HTTP_403_FORBIDDEN,
        )


class RateLimitedError(AppException):
    """Raised when an account is temporarily locked after failed logins."""

    def __init__(self, lockout_minutes: int):
        super().__init__(
            message=(
                "Your account has been temporarily locked after multiple failed login attempts. "
                f"Please wait {lockout_minutes} minutes before trying again."
            ),
            error_code="ERR_AUTH_004",
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        )


class InsufficientPermissionsError(AppException):
    """Raised when user doesn't have permission to perform an action."""

    def __init__(self, message: str = "Insufficient permissions", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_PERM_001",
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
        )


class UpstreamError(AppException):
    """Raised when the external service is unreachable or answers with an error."""

    def __init__(self, service: str, reason: str = ""):
        super().__init__(
            message="Error fetching data from the external service",
            error_code="ERR_UPSTREAM_001",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
        # Kept for logs only; never rendered.
        self.service = service
        self.reason = reason


class StorageError(AppException):
    """Raised for unexpected persistence failures."""

    def __init__(self, message: str = "Database error"):
        super().__init__(
            message=message,
            error_code="ERR_STORAGE_001",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


def error_body(message: str, error_code: str, errors: Optional[List[Dict[str, str]]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message, "error_code": error_code}
    if errors is not None:
        body["errors"] = errors
    return body


def _format_loc(loc) -> str:
    return ".".join(str(part) for part in loc)


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    if isinstance(exc, UpstreamError):
        logger.error("Upstream failure from %s on %s %s: %s", exc.service, request.method, request.url.path, exc.reason)
    elif exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.error_code, request.method, request.url.path, exc.message)

    errors = exc.details.get("errors") if isinstance(exc, ValidationError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.error_code, errors),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for HTTPException (FastAPI and Starlette) with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        401: "ERR_UNAUTHORIZED",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        405: "ERR_METHOD_NOT_ALLOWED",
        409: "ERR_CONFLICT",
        429: "ERR_RATE_LIMITED",
        500: "ERR_INTERNAL_SERVER",
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail), error_code),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    errors = [
        {"path": _format_loc(error.get("loc", ())), "message": error.get("msg", "Invalid value")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Invalid data", "ERR_VALIDATION", errors),
    )


async def integrity_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Constraint violations that escaped a service are reported as conflicts."""
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=error_body("The data conflicts with an existing record", "ERR_CONFLICT"),
    )


async def storage_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    error = StorageError()
    return JSONResponse(
        status_code=error.status_code,
        content=error_body(error.message, error.error_code),
    )


async def token_exception_handler(request: Request, exc: JWTError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=error_body("Invalid token", "ERR_AUTH_001"),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, type(exc).__name__)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("An internal server error occurred", "ERR_INTERNAL_SERVER"),
    )


def register_exception_handlers(app) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_exception_handler)
    app.add_exception_handler(SQLAlchemyError, storage_exception_handler)
    app.add_exception_handler(JWTError, token_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
