"""
Core middleware package.

This package provides:
- Error handling with the domain error taxonomy and response envelope
- Structured logging with credential redaction and PII masking
- Ownership and role authorization checks
"""

from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    setup_error_handlers,
    sanitize_error_message,
    JobBoardError,
    NotFoundError,
    InvalidStateError,
    ForbiddenError,
    ConflictError,
    AuthenticationError,
)

from core.middleware.logging import (
    StructuredLoggingMiddleware,
    setup_logging,
)

from core.middleware.authorization import (
    caller_may_manage,
    ensure_may_manage,
    caller_may_manage_company,
    check_role,
)

__all__ = [
    # Error handling
    "ErrorHandlingMiddleware",
    "setup_error_handlers",
    "sanitize_error_message",
    "JobBoardError",
    "NotFoundError",
    "InvalidStateError",
    "ForbiddenError",
    "ConflictError",
    "AuthenticationError",
    # Logging
    "StructuredLoggingMiddleware",
    "setup_logging",
    # Authorization
    "caller_may_manage",
    "ensure_may_manage",
    "caller_may_manage_company",
    "check_role",
]
