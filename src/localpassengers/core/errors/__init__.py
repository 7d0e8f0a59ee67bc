"""Error handling module with the shared JSON error envelope."""

from localpassengers.core.errors.codes import ErrorCode
from localpassengers.core.errors.exceptions import (
    AppException,
    ConflictError,
    ForbiddenError,
    UnauthorizedError,
)
from localpassengers.core.errors.handlers import (
    ErrorEnvelope,
    FieldError,
    build_error_response,
    register_exception_handlers,
)


__all__ = [
    # Exceptions
    "AppException",
    "ConflictError",
    "ErrorCode",
    # Handlers
    "ErrorEnvelope",
    "FieldError",
    "ForbiddenError",
    "UnauthorizedError",
    "build_error_response",
    "register_exception_handlers",
]
