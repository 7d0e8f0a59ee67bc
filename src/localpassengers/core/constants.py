"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# String field lengths
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_ROLE_NAME_LENGTH = 32

# Password requirements
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128
BCRYPT_ROUNDS = 12

# Token settings
TOKEN_JTI_LENGTH = 32
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_ACCESS_SECRET = "change-me-access-secret"
DEFAULT_INSECURE_REFRESH_SECRET = "change-me-refresh-secret"

# Identity headers injected for downstream handlers
USER_ID_HEADER = "x-user-id"
USER_EMAIL_HEADER = "x-user-email"
USER_ROLE_HEADER = "x-user-role"
IDENTITY_HEADERS = (USER_ID_HEADER, USER_EMAIL_HEADER, USER_ROLE_HEADER)

REQUEST_ID_HEADER = "X-Request-ID"
FORWARDED_PROTO_HEADER = "x-forwarded-proto"

# HSTS policy sent when HTTPS is enforced
HSTS_HEADER_VALUE = "max-age=63072000; includeSubDomains; preload"

# Audit log query defaults
DEFAULT_AUDIT_LIMIT = 100
DEFAULT_USER_AUDIT_LIMIT = 50
DEFAULT_DENIED_AUDIT_LIMIT = 50
MAX_AUDIT_LIMIT = 1000
