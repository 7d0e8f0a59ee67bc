"""Audit log of authorization decisions."""

from localpassengers.core.audit.models import AuditEntry, AuditStats, RoleDecisionCounts
from localpassengers.core.audit.service import AuditLog, build_audit_log
from localpassengers.core.audit.sinks import AuditSink, InMemoryAuditSink, RedisAuditSink


__all__ = [
    "AuditEntry",
    "AuditLog",
    "AuditSink",
    "AuditStats",
    "InMemoryAuditSink",
    "RedisAuditSink",
    "RoleDecisionCounts",
    "build_audit_log",
]
