"""Stable error codes returned in the ``errorCode`` field of error responses.

Clients branch on these values, so they never change once published.
"""

from enum import StrEnum


class ErrorCode(StrEnum):
    """Machine-readable error codes."""

    # Authentication (401)
    AUTH_TOKEN_MISSING = "AUTH_TOKEN_MISSING"
    AUTH_TOKEN_INVALID = "AUTH_TOKEN_INVALID"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ACCOUNT_INACTIVE = "ACCOUNT_INACTIVE"
    REFRESH_TOKEN_MISSING = "REFRESH_TOKEN_MISSING"
    REFRESH_TOKEN_INVALID = "REFRESH_TOKEN_INVALID"
    USER_NOT_FOUND = "USER_NOT_FOUND"

    # Authorization (403)
    FORBIDDEN_ACCESS = "FORBIDDEN_ACCESS"
    FORBIDDEN_STATION_MASTER = "FORBIDDEN_STATION_MASTER"
    FORBIDDEN_RESOURCE = "FORBIDDEN_RESOURCE"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    ROLE_REQUIRED = "ROLE_REQUIRED"

    # Client errors
    CONFLICT = "CONFLICT"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Server errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
