"""Audit entry and statistics schemas.

Every authorization decision made for a protected route produces one
``AuditEntry``. Entries are immutable once recorded.
"""

from datetime import UTC, datetime

from pydantic import ConfigDict, Field

from localpassengers.core.rbac.roles import Permission, Role
from localpassengers.core.responses import CamelModel


class AuditEntry(CamelModel):
    """A single authorization decision.

    Attributes:
        timestamp: When the decision was made (UTC)
        user_id: Caller's user ID, or None if no identity was established
        email: Caller's email, or None if no identity was established
        role: Caller's role, or None if no identity was established
        resource: The protected resource (route prefix or handler name)
        action: What was attempted, usually the HTTP method
        permission: Permission checked, or None for role-based decisions
        allowed: Whether access was granted
        reason: Why access was denied (or granted)
        path: Request path
        method: HTTP method
        request_id: Correlation ID of the request
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    user_id: int | None = None
    email: str | None = None
    role: Role | None = None
    resource: str
    action: str
    permission: Permission | None = None
    allowed: bool
    reason: str | None = None
    path: str | None = None
    method: str | None = None
    request_id: str | None = None


class RoleDecisionCounts(CamelModel):
    """Allowed/denied counts for one role."""

    allowed: int = 0
    denied: int = 0


class AuditStats(CamelModel):
    """Aggregate view over the audit log.

    ``by_role`` lists every role, starting at zero. Decisions made without
    an identity count towards the totals only.
    """

    total_decisions: int = 0
    allowed: int = 0
    denied: int = 0
    by_role: dict[Role, RoleDecisionCounts] = Field(
        default_factory=lambda: {role: RoleDecisionCounts() for role in Role}
    )
