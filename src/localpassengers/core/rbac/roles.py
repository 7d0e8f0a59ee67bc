"""Role and permission definitions for LocalPassengers.

Roles, in order of privilege:

1. ADMIN - full system access, user management, system configuration
2. STATION_MASTER - manages trains, alerts and reroutes at a station
3. PROJECT_MANAGER - project oversight, team coordination
4. TEAM_LEAD - team management, task assignment
5. USER - basic access, public data, alerts

ADMIN's permission list is derived from the ``Permission`` enum rather than
maintained by hand, so a newly added permission is granted to ADMIN
automatically and to nobody else.
"""

from enum import StrEnum
from types import MappingProxyType


class Permission(StrEnum):
    """Actions a role can be granted, as ``<action>:<resource>``."""

    # User management
    CREATE_USER = "create:user"
    READ_USER = "read:user"
    UPDATE_USER = "update:user"
    DELETE_USER = "delete:user"

    # Train management
    CREATE_TRAIN = "create:train"
    READ_TRAIN = "read:train"
    UPDATE_TRAIN = "update:train"
    DELETE_TRAIN = "delete:train"
    ASSIGN_TRAIN = "assign:train"

    # Alert management
    CREATE_ALERT = "create:alert"
    READ_ALERT = "read:alert"
    UPDATE_ALERT = "update:alert"
    DELETE_ALERT = "delete:alert"

    # Reroute management
    CREATE_REROUTE = "create:reroute"
    READ_REROUTE = "read:reroute"
    UPDATE_REROUTE = "update:reroute"
    DELETE_REROUTE = "delete:reroute"

    # File management
    UPLOAD_FILE = "upload:file"
    READ_FILE = "read:file"
    DELETE_FILE = "delete:file"

    # System administration
    MANAGE_ROLES = "manage:roles"
    VIEW_LOGS = "view:logs"
    SYSTEM_CONFIG = "system:config"

    @property
    def action(self) -> str:
        return self.value.split(":", 1)[0]

    @property
    def resource(self) -> str:
        return self.value.split(":", 1)[1]


class Role(StrEnum):
    """User roles. Declaration order is the privilege hierarchy."""

    ADMIN = "ADMIN"
    STATION_MASTER = "STATION_MASTER"
    PROJECT_MANAGER = "PROJECT_MANAGER"
    TEAM_LEAD = "TEAM_LEAD"
    USER = "USER"


_ROLE_PERMISSIONS: dict[Role, tuple[Permission, ...]] = {
    Role.ADMIN: tuple(Permission),
    Role.STATION_MASTER: (
        Permission.READ_USER,
        Permission.CREATE_TRAIN,
        Permission.READ_TRAIN,
        Permission.UPDATE_TRAIN,
        Permission.DELETE_TRAIN,
        Permission.CREATE_ALERT,
        Permission.READ_ALERT,
        Permission.UPDATE_ALERT,
        Permission.DELETE_ALERT,
        Permission.CREATE_REROUTE,
        Permission.READ_REROUTE,
        Permission.UPDATE_REROUTE,
        Permission.UPLOAD_FILE,
        Permission.READ_FILE,
    ),
    Role.PROJECT_MANAGER: (
        Permission.READ_USER,
        Permission.READ_TRAIN,
        Permission.READ_ALERT,
        Permission.CREATE_ALERT,
        Permission.READ_REROUTE,
        Permission.UPLOAD_FILE,
        Permission.READ_FILE,
    ),
    Role.TEAM_LEAD: (
        Permission.READ_USER,
        Permission.READ_TRAIN,
        Permission.READ_ALERT,
        Permission.READ_REROUTE,
        Permission.UPLOAD_FILE,
        Permission.READ_FILE,
    ),
    Role.USER: (
        Permission.READ_TRAIN,
        Permission.READ_ALERT,
        Permission.READ_REROUTE,
        Permission.READ_FILE,
    ),
}

# Read-only view; every Role has an entry
ROLE_PERMISSIONS: MappingProxyType[Role, tuple[Permission, ...]] = MappingProxyType(
    _ROLE_PERMISSIONS
)

ROLE_HIERARCHY: tuple[Role, ...] = tuple(Role)

ROLE_DESCRIPTIONS: MappingProxyType[Role, str] = MappingProxyType(
    {
        Role.ADMIN: (
            "Full system access - can manage all resources, users, and system configuration"
        ),
        Role.STATION_MASTER: (
            "Station management - can manage trains and alerts at assigned station"
        ),
        Role.PROJECT_MANAGER: "Project oversight - can view all data and coordinate teams",
        Role.TEAM_LEAD: (
            "Team coordination - can manage team activities and view project data"
        ),
        Role.USER: (
            "Basic access - can view public information and receive personalized alerts"
        ),
    }
)


def parse_role(value: str | None) -> Role | None:
    """Convert a raw role string to a Role, or None if unknown."""
    if value is None:
        return None
    try:
        return Role(value)
    except ValueError:
        return None
