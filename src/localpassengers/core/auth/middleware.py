"""Request middleware for authorization, request tracing and HTTPS.

This module provides middleware for:
- Authorizing every request against the route table
- Request tracing with unique IDs
- Redirecting plain-HTTP requests behind a TLS-terminating proxy
"""

import uuid
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import structlog
from fastapi import Request, Response
from starlette.datastructures import MutableHeaders
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import RedirectResponse

from localpassengers.core.audit.models import AuditEntry
from localpassengers.core.auth.backend import check_access_token
from localpassengers.core.auth.routing import AccessLevel, RouteRule, RouteTable, default_route_table
from localpassengers.core.auth.schemas import TokenPayload, TokenStatus
from localpassengers.core.auth.transport import extract_access_token
from localpassengers.core.constants import (
    FORWARDED_PROTO_HEADER,
    HSTS_HEADER_VALUE,
    IDENTITY_HEADERS,
    REQUEST_ID_HEADER,
    USER_EMAIL_HEADER,
    USER_ID_HEADER,
    USER_ROLE_HEADER,
)
from localpassengers.core.errors import (
    AppException,
    ErrorCode,
    ForbiddenError,
    UnauthorizedError,
    build_error_response,
)


if TYPE_CHECKING:
    from starlette.types import ASGIApp

    from localpassengers.core.audit.service import AuditLog


logger = structlog.get_logger()


class AuthorizationMiddleware(BaseHTTPMiddleware):
    """Middleware that authenticates and authorizes requests by path.

    For each request:
    1. Strip any client-supplied identity headers
    2. Classify the path; public and unmatched paths pass straight through
    3. Extract and verify the access token
    4. Check the caller's role against the matched rule
    5. Inject the verified identity for downstream handlers

    Every decision on a protected path is written to the audit log.

    Attributes:
        route_table: Rules that map paths to access requirements
    """

    def __init__(
        self,
        app: "ASGIApp",
        audit_log: "AuditLog | None" = None,
        route_table: RouteTable | None = None,
    ) -> None:
        super().__init__(app)
        self._audit_log = audit_log
        self.route_table = route_table or default_route_table()

    def _get_audit_log(self, request: Request) -> "AuditLog":
        if self._audit_log is not None:
            return self._audit_log
        return request.app.state.audit_log

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Run the authorization state machine for one request.

        Args:
            request: The incoming request
            call_next: The next middleware/handler

        Returns:
            The handler's response, or a 401/403 error envelope
        """
        _strip_identity_headers(request)

        rule = self.route_table.match(request.url.path, request.method)
        if rule is None or not rule.is_protected:
            return await call_next(request)

        token = extract_access_token(request)
        if token is None:
            return await self._reject(
                request,
                rule,
                None,
                UnauthorizedError(
                    "Authentication required. Please log in.",
                    error_code=ErrorCode.AUTH_TOKEN_MISSING,
                    hint="Log in via POST /api/auth/login",
                ),
            )

        check = check_access_token(token)
        if check.status is TokenStatus.EXPIRED:
            return await self._reject(
                request,
                rule,
                None,
                UnauthorizedError(
                    "Access token has expired",
                    error_code=ErrorCode.TOKEN_EXPIRED,
                    hint="Call POST /api/auth/refresh to obtain a new access token",
                ),
            )
        if check.payload is None:
            return await self._reject(
                request,
                rule,
                None,
                UnauthorizedError(
                    "Invalid access token",
                    error_code=ErrorCode.AUTH_TOKEN_INVALID,
                    hint="Log in again to obtain a new access token",
                ),
            )

        identity = check.payload
        if not rule.allows(identity.role):
            return await self._reject(request, rule, identity, _denial_for(rule, identity))

        await self._record(request, rule, identity, allowed=True, reason="access granted")
        _inject_identity(request, identity)
        return await call_next(request)

    async def _reject(
        self,
        request: Request,
        rule: RouteRule,
        identity: TokenPayload | None,
        exc: AppException,
    ) -> Response:
        await self._record(request, rule, identity, allowed=False, reason=exc.message)
        return build_error_response(request, exc)

    async def _record(
        self,
        request: Request,
        rule: RouteRule,
        identity: TokenPayload | None,
        *,
        allowed: bool,
        reason: str,
    ) -> None:
        await self._get_audit_log(request).record(
            AuditEntry(
                user_id=identity.user_id if identity else None,
                email=identity.email if identity else None,
                role=identity.role if identity else None,
                resource=rule.resource,
                action=request.method,
                permission=rule.permission,
                allowed=allowed,
                reason=reason,
                path=request.url.path,
                method=request.method,
                request_id=getattr(request.state, "request_id", None),
            )
        )


def _denial_for(rule: RouteRule, identity: TokenPayload) -> ForbiddenError:
    """Build the 403 for a caller whose role does not pass the rule."""
    details: dict[str, Any] = {"currentRole": identity.role.value}

    if rule.access is AccessLevel.ADMIN:
        details["requiredRole"] = "ADMIN"
        return ForbiddenError("Admin access required", error_code=rule.error_code, details=details)

    if rule.access is AccessLevel.PERMISSION:
        details["requiredPermission"] = str(rule.permission)
        return ForbiddenError(
            "Insufficient permissions",
            error_code=rule.error_code,
            details=details,
        )

    details["requiredRoles"] = sorted(role.value for role in rule.roles)
    return ForbiddenError(
        f"Access denied. Required role: {rule.describe_requirement()}",
        error_code=rule.error_code,
        details=details,
    )


def _strip_identity_headers(request: Request) -> None:
    """Remove identity headers a client may have sent itself.

    Mutates the ASGI scope so the removal is visible to every downstream
    handler.
    """
    headers = MutableHeaders(scope=request.scope)
    for name in IDENTITY_HEADERS:
        del headers[name]


def _inject_identity(request: Request, identity: TokenPayload) -> None:
    headers = MutableHeaders(scope=request.scope)
    headers[USER_ID_HEADER] = str(identity.user_id)
    # Header values are latin-1, internationalized addresses are percent-encoded
    headers[USER_EMAIL_HEADER] = quote(identity.email, safe="@+")
    headers[USER_ROLE_HEADER] = identity.role.value

    request.state.identity = identity
    request.state.user_id = identity.user_id

    structlog.contextvars.bind_contextvars(
        user_id=identity.user_id,
        role=identity.role.value,
    )


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware that adds a unique request ID to each request.

    The request ID is added to:
    - request.state.request_id
    - Response header X-Request-ID
    - Structlog context
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process the request and add request ID.

        Args:
            request: The incoming request
            call_next: The next middleware/handler

        Returns:
            The response with X-Request-ID header
        """
        # Propagate the caller's request ID or generate a new one
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id", "user_id", "role")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class HttpsRedirectMiddleware(BaseHTTPMiddleware):
    """Redirect plain-HTTP requests to HTTPS and send HSTS.

    Meant for deployments behind a proxy that terminates TLS and reports the
    original scheme in ``x-forwarded-proto``. Requests without that header
    are served as-is.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        proto = request.headers.get(FORWARDED_PROTO_HEADER)
        if proto is not None and proto.split(",")[0].strip().lower() == "http":
            target = request.url.replace(scheme="https")
            logger.info("https_redirect", path=request.url.path)
            return RedirectResponse(str(target), status_code=308)

        response = await call_next(request)
        response.headers["Strict-Transport-Security"] = HSTS_HEADER_VALUE
        return response
