"""Permission checking logic.

Pure lookups against the static role/permission table. Nothing here
touches I/O, so every function is safe to call from any request.
"""

from collections.abc import Iterable

from localpassengers.core.rbac.roles import (
    ROLE_HIERARCHY,
    ROLE_PERMISSIONS,
    Permission,
    Role,
)


def get_role_permissions(role: Role | None) -> tuple[Permission, ...]:
    """Get all permissions granted to a role.

    Args:
        role: The role, or None for an unknown role

    Returns:
        Permissions in table order; empty for an unknown role
    """
    if role is None:
        return ()
    return ROLE_PERMISSIONS.get(role, ())


def has_permission(role: Role | None, permission: Permission) -> bool:
    """Check if a role has a specific permission.

    Args:
        role: The role to check
        permission: The permission required

    Returns:
        True if the role is granted the permission
    """
    return permission in get_role_permissions(role)


def has_any_permission(role: Role | None, permissions: Iterable[Permission]) -> bool:
    """Check if a role has at least one of the specified permissions."""
    return any(has_permission(role, permission) for permission in permissions)


def has_all_permissions(role: Role | None, permissions: Iterable[Permission]) -> bool:
    """Check if a role has every one of the specified permissions."""
    return all(has_permission(role, permission) for permission in permissions)


def role_satisfies(role: Role | None, required_roles: Iterable[Role]) -> bool:
    """Check a role against a role-specific requirement.

    ADMIN satisfies every role requirement in addition to its own.

    Args:
        role: The caller's role
        required_roles: Roles accepted by the resource

    Returns:
        True if the role is accepted
    """
    if role is None:
        return False
    return role is Role.ADMIN or role in set(required_roles)


def get_role_level(role: Role) -> int:
    """Get a role's privilege level. Lower number means more privilege."""
    return ROLE_HIERARCHY.index(role)


def has_higher_or_equal_privilege(role_a: Role, role_b: Role) -> bool:
    """Check if role_a is at least as privileged as role_b."""
    return get_role_level(role_a) <= get_role_level(role_b)
