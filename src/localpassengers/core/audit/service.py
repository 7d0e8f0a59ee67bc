"""Audit log service for authorization decisions.

Records every decision the authorization middleware and route guards make,
and answers the queries behind the RBAC inspection routes.
"""

import structlog

from localpassengers.config import Settings
from localpassengers.core.audit.models import AuditEntry, AuditStats
from localpassengers.core.audit.sinks import AuditSink, InMemoryAuditSink, RedisAuditSink
from localpassengers.core.constants import (
    DEFAULT_AUDIT_LIMIT,
    DEFAULT_DENIED_AUDIT_LIMIT,
    DEFAULT_USER_AUDIT_LIMIT,
)


log = structlog.get_logger()


class AuditLog:
    """Query and record authorization decisions over a sink.

    Example:
        audit_log = AuditLog(InMemoryAuditSink())
        await audit_log.record(entry)
        latest = await audit_log.recent(10)
    """

    def __init__(self, sink: AuditSink | None = None) -> None:
        self.sink = sink if sink is not None else InMemoryAuditSink()

    async def record(self, entry: AuditEntry) -> AuditEntry:
        """Store a decision and emit it as an ``rbac_decision`` log line.

        Args:
            entry: The decision to record

        Returns:
            The recorded entry
        """
        await self.sink.append(entry)

        log_method = log.info if entry.allowed else log.warning
        log_method(
            "rbac_decision",
            allowed=entry.allowed,
            user_id=entry.user_id,
            role=entry.role.value if entry.role else None,
            resource=entry.resource,
            action=entry.action,
            permission=entry.permission.value if entry.permission else None,
            reason=entry.reason,
            path=entry.path,
        )
        return entry

    async def recent(self, limit: int = DEFAULT_AUDIT_LIMIT) -> list[AuditEntry]:
        """Get the most recent decisions, newest first."""
        entries = await self.sink.entries()
        return _newest_first(entries, limit)

    async def recent_for_user(
        self,
        user_id: int,
        limit: int = DEFAULT_USER_AUDIT_LIMIT,
    ) -> list[AuditEntry]:
        """Get the most recent decisions for one user, newest first."""
        entries = [entry for entry in await self.sink.entries() if entry.user_id == user_id]
        return _newest_first(entries, limit)

    async def recent_denied(self, limit: int = DEFAULT_DENIED_AUDIT_LIMIT) -> list[AuditEntry]:
        """Get the most recent denials, newest first."""
        entries = [entry for entry in await self.sink.entries() if not entry.allowed]
        return _newest_first(entries, limit)

    async def clear(self) -> None:
        await self.sink.clear()
        log.info("rbac_audit_log_cleared")

    async def stats(self) -> AuditStats:
        """Count decisions overall and per role."""
        stats = AuditStats()
        for entry in await self.sink.entries():
            stats.total_decisions += 1
            if entry.allowed:
                stats.allowed += 1
            else:
                stats.denied += 1

            if entry.role is None:
                continue
            counts = stats.by_role[entry.role]
            if entry.allowed:
                counts.allowed += 1
            else:
                counts.denied += 1
        return stats


def _newest_first(entries: list[AuditEntry], limit: int) -> list[AuditEntry]:
    if limit <= 0:
        return []
    return entries[::-1][:limit]


def build_audit_log(settings: Settings) -> AuditLog:
    """Create the audit log selected by ``AUDIT_BACKEND``."""
    sink: AuditSink
    if settings.audit_backend == "redis":
        sink = RedisAuditSink(settings.audit_redis_key, max_entries=settings.audit_max_entries)
    else:
        sink = InMemoryAuditSink(max_entries=settings.audit_max_entries)
    return AuditLog(sink)
