"""Route table for the authorization middleware.

Each rule binds a path prefix (and optionally a set of HTTP methods) to an
access level. The most specific matching rule wins: rules are tried longest
prefix first, and method-restricted rules before unrestricted ones with the
same prefix.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum

from localpassengers.core.errors.codes import ErrorCode
from localpassengers.core.rbac.checker import has_permission, role_satisfies
from localpassengers.core.rbac.roles import Permission, Role


class AccessLevel(StrEnum):
    """What a matched route requires of the caller."""

    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"
    ROLE = "role"
    PERMISSION = "permission"


@dataclass(frozen=True)
class RouteRule:
    """Access requirement for a path prefix.

    Attributes:
        prefix: Path prefix; matches the path itself and any sub-path
        access: Required access level
        roles: Accepted roles for ROLE rules (ADMIN is always accepted)
        permission: Required permission for PERMISSION rules
        methods: Upper-case HTTP methods the rule applies to; empty means all
        error_code: Error code returned when the caller is rejected
        resource: Name recorded in the audit log
    """

    prefix: str
    access: AccessLevel
    roles: frozenset[Role] = frozenset()
    permission: Permission | None = None
    methods: frozenset[str] = frozenset()
    error_code: ErrorCode = ErrorCode.FORBIDDEN_ACCESS
    resource: str = ""

    def __post_init__(self) -> None:
        if self.access is AccessLevel.ROLE and not self.roles:
            raise ValueError(f"Role rule for {self.prefix} needs at least one role")
        if self.access is AccessLevel.PERMISSION and self.permission is None:
            raise ValueError(f"Permission rule for {self.prefix} needs a permission")
        if not self.resource:
            object.__setattr__(self, "resource", self.prefix)

    @property
    def is_protected(self) -> bool:
        return self.access is not AccessLevel.PUBLIC

    def matches(self, path: str, method: str) -> bool:
        if self.methods and method.upper() not in self.methods:
            return False
        prefix = self.prefix.rstrip("/")
        return path == prefix or path.startswith(prefix + "/")

    def allows(self, role: Role) -> bool:
        """Check whether a verified role passes this rule."""
        if self.access is AccessLevel.ADMIN:
            return role is Role.ADMIN
        if self.access is AccessLevel.ROLE:
            return role_satisfies(role, self.roles)
        if self.access is AccessLevel.PERMISSION:
            return self.permission is not None and has_permission(role, self.permission)
        return True

    def describe_requirement(self) -> str:
        """Human-readable requirement used in denial messages and audit reasons."""
        if self.access is AccessLevel.ADMIN:
            return Role.ADMIN.value
        if self.access is AccessLevel.ROLE:
            return " or ".join(sorted(role.value for role in self.roles | {Role.ADMIN}))
        if self.access is AccessLevel.PERMISSION:
            return str(self.permission)
        return "authentication"


@dataclass
class RouteTable:
    """Ordered collection of route rules."""

    rules: list[RouteRule] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.rules = sorted(
            self.rules,
            key=lambda rule: (len(rule.prefix.rstrip("/")), bool(rule.methods)),
            reverse=True,
        )

    def match(self, path: str, method: str = "GET") -> RouteRule | None:
        """Find the most specific rule for a request, or None if unmatched."""
        for rule in self.rules:
            if rule.matches(path, method):
                return rule
        return None


def public(*prefixes: str) -> list[RouteRule]:
    return [RouteRule(prefix, AccessLevel.PUBLIC) for prefix in prefixes]


def authenticated(*prefixes: str) -> list[RouteRule]:
    return [RouteRule(prefix, AccessLevel.AUTHENTICATED) for prefix in prefixes]


def admin_only(*prefixes: str) -> list[RouteRule]:
    return [
        RouteRule(prefix, AccessLevel.ADMIN, error_code=ErrorCode.FORBIDDEN_ACCESS)
        for prefix in prefixes
    ]


def role_required(
    prefix: str,
    roles: Iterable[Role],
    error_code: ErrorCode = ErrorCode.ROLE_REQUIRED,
) -> RouteRule:
    return RouteRule(prefix, AccessLevel.ROLE, roles=frozenset(roles), error_code=error_code)


def permission_required(
    prefix: str,
    permission: Permission,
    methods: Iterable[str] = (),
) -> RouteRule:
    return RouteRule(
        prefix,
        AccessLevel.PERMISSION,
        permission=permission,
        methods=frozenset(method.upper() for method in methods),
        error_code=ErrorCode.PERMISSION_DENIED,
    )


def default_route_table() -> RouteTable:
    """Route groups of the LocalPassengers API."""
    return RouteTable(
        [
            *public(
                "/api/auth/login",
                "/api/auth/register",
                "/api/auth/refresh",
                "/api/auth/logout",
                "/api/health",
            ),
            *admin_only("/api/admin", "/api/rbac/audit-log", "/api/rbac/stats"),
            role_required(
                "/api/station-master",
                [Role.STATION_MASTER],
                error_code=ErrorCode.FORBIDDEN_STATION_MASTER,
            ),
            role_required("/api/trains/manage", [Role.STATION_MASTER]),
            permission_required("/api/upload", Permission.UPLOAD_FILE),
            permission_required("/api/files", Permission.UPLOAD_FILE, methods=["POST"]),
            *authenticated(
                "/api/auth/me",
                "/api/rbac/permissions",
                "/api/users",
                "/api/projects",
                "/api/tasks",
                "/api/teams",
                "/api/alerts",
                "/api/trains",
                "/api/reroutes",
                "/api/transactions",
                "/api/query-optimization",
                "/api/files",
                "/api/email",
            ),
        ]
    )
