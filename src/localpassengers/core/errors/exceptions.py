"""Domain exceptions for the application.

These exceptions represent business-logic errors and are converted to the
JSON error envelope by the exception handlers (and, for requests rejected
before routing, by the authorization middleware).
"""

from typing import Any

from localpassengers.core.errors.codes import ErrorCode


class AppException(Exception):
    """Base exception for all application errors.

    All domain exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        hint: Optional suggestion for how the client can recover
        details: Additional error details merged into the response body
    """

    message: str = "An unexpected error occurred"
    error_code: str = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.hint = hint
        self.details = details or {}
        super().__init__(self.message)


class ConflictError(AppException):
    """Raised when there's a conflict with existing data."""

    message = "Resource conflict"
    error_code = ErrorCode.CONFLICT
    status_code = 409


class UnauthorizedError(AppException):
    """Raised when authentication is required but not provided or invalid.

    Recoverable by logging in again or by refreshing the access token.
    """

    message = "Authentication required"
    error_code = ErrorCode.AUTH_REQUIRED
    status_code = 401


class ForbiddenError(AppException):
    """Raised when the caller's role lacks the privilege for a resource.

    Not recoverable without a role change.

    Example:
        raise ForbiddenError(
            "Access denied",
            error_code=ErrorCode.PERMISSION_DENIED,
            details={"required": "delete:train"},
        )
    """

    message = "Access forbidden"
    error_code = ErrorCode.FORBIDDEN_ACCESS
    status_code = 403

