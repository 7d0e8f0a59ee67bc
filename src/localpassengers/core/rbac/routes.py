"""RBAC inspection routes.

- ``GET /rbac/permissions``: the caller's role and permissions
- ``GET /rbac/audit-log``: recent authorization decisions (ADMIN)
- ``GET /rbac/stats``: decision counts overall and per role (ADMIN)

The ADMIN-only routes are enforced by the authorization middleware's route
table.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Query
from fastapi.encoders import jsonable_encoder

from localpassengers.core.auth.dependencies import AuditLogDep, CurrentIdentity
from localpassengers.core.constants import DEFAULT_AUDIT_LIMIT, MAX_AUDIT_LIMIT
from localpassengers.core.rbac.checker import get_role_permissions
from localpassengers.core.rbac.roles import ROLE_DESCRIPTIONS


router = APIRouter(prefix="/rbac", tags=["rbac"])


@router.get("/permissions", summary="Current user's permissions")
async def permissions(identity: CurrentIdentity) -> dict[str, Any]:
    granted = [permission.value for permission in get_role_permissions(identity.role)]
    return {
        "success": True,
        "user": {
            "id": identity.user_id,
            "email": identity.email,
            "role": identity.role.value,
        },
        "roleDescription": ROLE_DESCRIPTIONS[identity.role],
        "permissions": granted,
        "permissionCount": len(granted),
    }


@router.get("/audit-log", summary="Recent authorization decisions")
async def audit_log(
    audit: AuditLogDep,
    limit: Annotated[int, Query(ge=1, le=MAX_AUDIT_LIMIT)] = DEFAULT_AUDIT_LIMIT,
    user_id: Annotated[int | None, Query(alias="userId")] = None,
    denied: bool = False,
) -> dict[str, Any]:
    """Get audit entries, newest first.

    ``userId`` takes precedence over ``denied``.
    """
    if user_id is not None:
        entries = await audit.recent_for_user(user_id, limit)
    elif denied:
        entries = await audit.recent_denied(limit)
    else:
        entries = await audit.recent(limit)

    return {
        "success": True,
        "count": len(entries),
        "logs": jsonable_encoder(entries, by_alias=True),
    }


@router.get("/stats", summary="Authorization decision statistics")
async def stats(audit: AuditLogDep) -> dict[str, Any]:
    return {
        "success": True,
        "stats": jsonable_encoder(await audit.stats(), by_alias=True),
    }
