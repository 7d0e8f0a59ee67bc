"""FastAPI dependencies for authentication and authorization.

This module provides FastAPI dependency injection functions for:
- Reading the identity injected by the authorization middleware
- Accessing the audit log
- Guarding individual handlers by permission, role or ownership

Guards are dependency factories:

    @router.delete("/trains/{train_id}")
    async def delete_train(
        identity: Annotated[TokenPayload, Depends(require_permission(Permission.DELETE_TRAIN))],
    ): ...
"""

from collections.abc import Awaitable, Callable
from typing import Annotated
from urllib.parse import unquote

from fastapi import Depends, Request

from localpassengers.core.audit.models import AuditEntry
from localpassengers.core.audit.service import AuditLog
from localpassengers.core.auth.schemas import TokenPayload
from localpassengers.core.constants import USER_EMAIL_HEADER, USER_ID_HEADER, USER_ROLE_HEADER
from localpassengers.core.errors import ErrorCode, ForbiddenError, UnauthorizedError
from localpassengers.core.rbac.checker import (
    has_any_permission,
    has_permission,
    role_satisfies,
)
from localpassengers.core.rbac.roles import Permission, Role, parse_role


Guard = Callable[..., Awaitable[TokenPayload]]


def get_identity(request: Request) -> TokenPayload | None:
    """Get the identity the authorization middleware admitted, if any.

    Falls back to the ``x-user-*`` headers, which the middleware strips from
    inbound requests and only sets after verifying a token. The email header
    is percent-encoded.
    """
    identity = getattr(request.state, "identity", None)
    if isinstance(identity, TokenPayload):
        return identity

    raw_id = request.headers.get(USER_ID_HEADER)
    email = request.headers.get(USER_EMAIL_HEADER)
    role = parse_role(request.headers.get(USER_ROLE_HEADER))
    if raw_id is None or email is None or role is None:
        return None
    try:
        return TokenPayload(user_id=int(raw_id), email=unquote(email), role=role)
    except ValueError:
        return None


def get_current_identity(
    identity: Annotated[TokenPayload | None, Depends(get_identity)],
) -> TokenPayload:
    """Get the authenticated identity.

    Raises:
        UnauthorizedError: If the request carries no verified identity
    """
    if identity is None:
        raise UnauthorizedError(
            "Authentication required",
            error_code=ErrorCode.AUTH_REQUIRED,
            hint="Log in via POST /api/auth/login",
        )
    return identity


def get_audit_log(request: Request) -> AuditLog:
    """Get the application's audit log."""
    return request.app.state.audit_log


# Type aliases for cleaner dependency injection
OptionalIdentity = Annotated[TokenPayload | None, Depends(get_identity)]
CurrentIdentity = Annotated[TokenPayload, Depends(get_current_identity)]
AuditLogDep = Annotated[AuditLog, Depends(get_audit_log)]


# ============================================================
# Route Guards
# ============================================================


async def _audit(
    audit_log: AuditLog,
    request: Request,
    identity: TokenPayload | None,
    *,
    resource: str,
    allowed: bool,
    reason: str,
    permission: Permission | None = None,
) -> None:
    await audit_log.record(
        AuditEntry(
            user_id=identity.user_id if identity else None,
            email=identity.email if identity else None,
            role=identity.role if identity else None,
            resource=resource,
            action=request.method,
            permission=permission,
            allowed=allowed,
            reason=reason,
            path=request.url.path,
            method=request.method,
            request_id=getattr(request.state, "request_id", None),
        )
    )


async def _authenticated(
    audit_log: AuditLog,
    request: Request,
    identity: TokenPayload | None,
    resource: str,
) -> TokenPayload:
    if identity is None:
        await _audit(
            audit_log,
            request,
            None,
            resource=resource,
            allowed=False,
            reason="authentication required",
        )
        raise UnauthorizedError("Authentication required", error_code=ErrorCode.AUTH_REQUIRED)
    return identity


def require_permission(permission: Permission, resource: str | None = None) -> Guard:
    """Require a specific permission.

    Args:
        permission: The permission the caller's role must hold
        resource: Name recorded in the audit log, defaults to the
            permission's resource

    Returns:
        A dependency that yields the caller's identity

    Raises:
        UnauthorizedError: If the caller is not authenticated
        ForbiddenError: If the caller's role lacks the permission
    """
    resource_name = resource or permission.resource

    async def guard(
        request: Request,
        identity: OptionalIdentity,
        audit_log: AuditLogDep,
    ) -> TokenPayload:
        caller = await _authenticated(audit_log, request, identity, resource_name)
        allowed = has_permission(caller.role, permission)
        await _audit(
            audit_log,
            request,
            caller,
            resource=resource_name,
            permission=permission,
            allowed=allowed,
            reason="permission granted" if allowed else f"missing permission {permission}",
        )
        if not allowed:
            raise ForbiddenError(
                "Insufficient permissions",
                error_code=ErrorCode.PERMISSION_DENIED,
                details={
                    "requiredPermission": permission.value,
                    "currentRole": caller.role.value,
                },
            )
        return caller

    return guard


def require_any_permission(*permissions: Permission, resource: str = "multiple") -> Guard:
    """Require at least one of several permissions."""
    if not permissions:
        raise ValueError("require_any_permission needs at least one permission")

    async def guard(
        request: Request,
        identity: OptionalIdentity,
        audit_log: AuditLogDep,
    ) -> TokenPayload:
        caller = await _authenticated(audit_log, request, identity, resource)
        allowed = has_any_permission(caller.role, permissions)
        required = [permission.value for permission in permissions]
        await _audit(
            audit_log,
            request,
            caller,
            resource=resource,
            allowed=allowed,
            reason=(
                "permission granted"
                if allowed
                else f"missing any of {', '.join(required)}"
            ),
        )
        if not allowed:
            raise ForbiddenError(
                "Insufficient permissions",
                error_code=ErrorCode.PERMISSION_DENIED,
                details={"requiredPermissions": required, "currentRole": caller.role.value},
            )
        return caller

    return guard


def require_any_role(*roles: Role, resource: str = "role-protected") -> Guard:
    """Require one of the given roles. ADMIN always passes."""
    if not roles:
        raise ValueError("require_any_role needs at least one role")

    async def guard(
        request: Request,
        identity: OptionalIdentity,
        audit_log: AuditLogDep,
    ) -> TokenPayload:
        caller = await _authenticated(audit_log, request, identity, resource)
        allowed = role_satisfies(caller.role, roles)
        required = [role.value for role in roles]
        await _audit(
            audit_log,
            request,
            caller,
            resource=resource,
            allowed=allowed,
            reason="role granted" if allowed else f"requires role {' or '.join(required)}",
        )
        if not allowed:
            raise ForbiddenError(
                f"Access denied. Required role: {' or '.join(required)}",
                error_code=ErrorCode.ROLE_REQUIRED,
                details={"requiredRoles": required, "currentRole": caller.role.value},
            )
        return caller

    return guard


def require_role(role: Role, resource: str = "role-protected") -> Guard:
    """Require a single role. ADMIN always passes."""
    return require_any_role(role, resource=resource)


def require_self_or_admin(param: str = "user_id", resource: str = "user") -> Guard:
    """Allow callers acting on their own record, or ADMIN.

    Args:
        param: Name of the path parameter holding the target user ID
        resource: Name recorded in the audit log

    Returns:
        A dependency that yields the caller's identity
    """

    async def guard(
        request: Request,
        identity: OptionalIdentity,
        audit_log: AuditLogDep,
    ) -> TokenPayload:
        caller = await _authenticated(audit_log, request, identity, resource)
        target = request.path_params.get(param)
        is_self = target is not None and str(target) == str(caller.user_id)
        allowed = is_self or caller.role is Role.ADMIN
        await _audit(
            audit_log,
            request,
            caller,
            resource=resource,
            allowed=allowed,
            reason="owner or admin" if allowed else "not the resource owner",
        )
        if not allowed:
            raise ForbiddenError(
                "You can only access your own resources",
                error_code=ErrorCode.FORBIDDEN_RESOURCE,
            )
        return caller

    return guard
