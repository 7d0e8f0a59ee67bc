"""Authentication module: tokens, transport, middleware and guards."""

from localpassengers.core.auth.backend import (
    check_access_token,
    check_refresh_token,
    decode_without_verify,
    get_token_expiry,
    hash_password,
    is_token_expired,
    issue_access_token,
    issue_refresh_token,
    verify_access_token,
    verify_password,
    verify_refresh_token,
)
from localpassengers.core.auth.dependencies import (
    AuditLogDep,
    CurrentIdentity,
    OptionalIdentity,
    get_current_identity,
    get_identity,
    require_any_permission,
    require_any_role,
    require_permission,
    require_role,
    require_self_or_admin,
)
from localpassengers.core.auth.middleware import (
    AuthorizationMiddleware,
    HttpsRedirectMiddleware,
    RequestIdMiddleware,
)
from localpassengers.core.auth.routes import router as auth_router
from localpassengers.core.auth.routing import (
    AccessLevel,
    RouteRule,
    RouteTable,
    default_route_table,
)
from localpassengers.core.auth.schemas import TokenCheck, TokenPair, TokenPayload, TokenStatus
from localpassengers.core.auth.service import AuthService
from localpassengers.core.auth.transport import (
    attach_access_token,
    attach_tokens,
    clear_tokens,
    extract_access_token,
    extract_refresh_token,
)


__all__ = [
    "AccessLevel",
    "AuditLogDep",
    "AuthService",
    "AuthorizationMiddleware",
    "CurrentIdentity",
    "HttpsRedirectMiddleware",
    "OptionalIdentity",
    "RequestIdMiddleware",
    "RouteRule",
    "RouteTable",
    "TokenCheck",
    "TokenPair",
    "TokenPayload",
    "TokenStatus",
    "attach_access_token",
    "attach_tokens",
    "auth_router",
    "check_access_token",
    "check_refresh_token",
    "clear_tokens",
    "decode_without_verify",
    "default_route_table",
    "extract_access_token",
    "extract_refresh_token",
    "get_current_identity",
    "get_identity",
    "get_token_expiry",
    "hash_password",
    "is_token_expired",
    "issue_access_token",
    "issue_refresh_token",
    "require_any_permission",
    "require_any_role",
    "require_permission",
    "require_role",
    "require_self_or_admin",
    "verify_access_token",
    "verify_password",
    "verify_refresh_token",
]
