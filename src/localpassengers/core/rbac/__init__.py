"""Role-based access control: roles, permissions and checks."""

from localpassengers.core.rbac.checker import (
    get_role_level,
    get_role_permissions,
    has_all_permissions,
    has_any_permission,
    has_higher_or_equal_privilege,
    has_permission,
    role_satisfies,
)
from localpassengers.core.rbac.roles import (
    ROLE_DESCRIPTIONS,
    ROLE_HIERARCHY,
    ROLE_PERMISSIONS,
    Permission,
    Role,
    parse_role,
)


__all__ = [
    "ROLE_DESCRIPTIONS",
    "ROLE_HIERARCHY",
    "ROLE_PERMISSIONS",
    "Permission",
    "Role",
    "get_role_level",
    "get_role_permissions",
    "has_all_permissions",
    "has_any_permission",
    "has_higher_or_equal_privilege",
    "has_permission",
    "parse_role",
    "role_satisfies",
]
