"""
Error handling for the API.

Defines the domain error taxonomy raised by services and maps every failure
to the response envelope `{"success": false, "message": ..., "errors": [...]}`.
Messages are sanitized so secrets never reach a client or a log line.
"""

import logging
import re
import traceback
from typing import Any, Callable, Optional

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

logger = logging.getLogger(__name__)

# Patterns for sensitive data that should never be logged
SENSITIVE_PATTERNS = [
    re.compile(r'password"?\s*[:=]\s*"?[^"\s,}]+', re.IGNORECASE),
    re.compile(r'token"?\s*[:=]\s*"?[^"\s,}]+', re.IGNORECASE),
    re.compile(r'api[_-]?key"?\s*[:=]\s*"?[^"\s,}]+', re.IGNORECASE),
    re.compile(r'secret"?\s*[:=]\s*"?[^"\s,}]+', re.IGNORECASE),
    re.compile(r'authorization"?\s*:\s*"?[^"\s,}]+', re.IGNORECASE),
    re.compile(r'\$2[aby]\$\d{2}\$[./A-Za-z0-9]{53}'),  # bcrypt hash
    re.compile(r'\b\d{16}\b'),  # Credit card
]


# ==================== Domain Errors ===================== #
class JobBoardError(Exception):
    """Base class for errors a service raises to end the current request."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request failed"

    def __init__(self, message: Optional[str] = None, errors: Optional[list] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class NotFoundError(JobBoardError):
    """Referenced job, application or other record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class InvalidStateError(JobBoardError):
    """Operation is not allowed in the record's current state."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid state"


class ForbiddenError(JobBoardError):
    """Caller lacks the role or ownership the operation requires."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class ConflictError(JobBoardError):
    """A unique record already exists, e.g. a second application to one job."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class AuthenticationError(JobBoardError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized, token failed"


# ==================== Helpers ===================== #
def sanitize_error_message(message: Any) -> str:
    """
    Remove sensitive information from error messages.

    Args:
        message: Original error message

    Returns:
        Sanitized error message
    """
    sanitized = str(message)
    for pattern in SENSITIVE_PATTERNS:
        sanitized = pattern.sub('[REDACTED]', sanitized)
    return sanitized


def get_safe_error_details(exc: Exception, include_details: bool = False) -> dict[str, Any]:
    """
    Extract safe error details without exposing sensitive information.

    Args:
        exc: The exception to extract details from
        include_details: Whether to include the traceback (only in debug)

    Returns:
        Dictionary with safe error details
    """
    details = {
        "type": type(exc).__name__,
        "message": sanitize_error_message(str(exc)),
    }
    if include_details:
        details["traceback"] = sanitize_error_message(traceback.format_exc())
    return details


def error_response(
    status_code: int,
    message: str,
    errors: Optional[list[Any]] = None,
) -> JSONResponse:
    """Build the failure envelope."""
    content: dict[str, Any] = {"success": False, "message": message}
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content)


def format_validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """
    Flatten pydantic errors to `{field, message, type}` entries.

    The leading location part (`body`, `query`, `path`) is dropped so the
    field reads like the JSON key the client sent.
    """
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        if len(loc) > 1 and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        errors.append(
            {
                "field": ".".join(loc),
                "message": sanitize_error_message(error.get("msg", "")),
                "type": error.get("type", "value_error"),
            }
        )
    return errors


# ==================== Middleware ===================== #
class ErrorHandlingMiddleware:
    """
    Outermost safety net.

    Registered handlers turn known failures into envelopes; anything that
    escapes them lands here and becomes a sanitized 500.
    """

    def __init__(self, app: Callable, debug: bool = False):
        self.app = app
        self.debug = debug

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except Exception as exc:
            response = self._handle_exception(exc, scope)
            await response(scope, receive, send)

    def _handle_exception(self, exc: Exception, scope: dict) -> Response:
        request_path = scope.get("path", "unknown")
        request_method = scope.get("method", "unknown")

        logger.error(
            f"Unhandled exception: {request_method} {request_path} - "
            f"{type(exc).__name__}: {sanitize_error_message(str(exc))}",
            exc_info=True,
        )

        errors = [get_safe_error_details(exc, include_details=True)] if self.debug else None
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error", errors)


# ==================== Exception Handlers ===================== #
def setup_error_handlers(app):
    """
    Set up exception handlers for FastAPI application.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(JobBoardError)
    async def job_board_error_handler(request: Request, exc: JobBoardError):
        """Handle domain errors raised by services and dependencies."""
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            f"{type(exc).__name__}: {request.method} {request.url.path} - "
            f"{sanitize_error_message(exc.message)}"
        )
        return error_response(exc.status_code, sanitize_error_message(exc.message), exc.errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions (unknown routes, wrong methods, explicit raises)."""
        return error_response(exc.status_code, sanitize_error_message(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle validation errors."""
        errors = format_validation_errors(exc)
        logger.warning(
            f"Validation error: {request.method} {request.url.path} - Errors: {errors}"
        )
        return error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", errors)

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        """Handle unique/foreign key violations that slipped past service checks."""
        logger.warning(
            f"Database integrity error: {request.method} {request.url.path}"
        )
        return error_response(
            status.HTTP_400_BAD_REQUEST, "Database integrity constraint violated"
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        """Handle any other store failure."""
        logger.error(
            f"SQLAlchemy error: {request.method} {request.url.path}",
            exc_info=True,
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error")
