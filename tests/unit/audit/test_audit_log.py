"""Tests for the authorization audit log."""

import asyncio
from datetime import UTC, datetime
from unittest.mock import patch

import pytest

from localpassengers.config import Settings
from localpassengers.core.audit import (
    AuditEntry,
    AuditLog,
    InMemoryAuditSink,
    RedisAuditSink,
    RoleDecisionCounts,
    build_audit_log,
)
from localpassengers.core.rbac.roles import Permission, Role


pytestmark = pytest.mark.unit


def entry(
    user_id: int | None = 7,
    role: Role | None = Role.USER,
    allowed: bool = True,
    resource: str = "/api/trains",
) -> AuditEntry:
    return AuditEntry(
        user_id=user_id,
        email=f"user{user_id}@example.com" if user_id is not None else None,
        role=role,
        resource=resource,
        action="GET",
        allowed=allowed,
        reason="test",
        path=resource,
        method="GET",
    )


@pytest.fixture
def audit_log() -> AuditLog:
    return AuditLog(InMemoryAuditSink())


class TestAuditEntry:
    def test_is_immutable(self):
        recorded = entry()

        with pytest.raises(ValueError):
            recorded.allowed = False  # type: ignore[misc]

    def test_timestamp_defaults_to_now(self):
        before = datetime.now(UTC)

        assert entry().timestamp >= before

    def test_serializes_camel_case(self):
        data = AuditEntry(
            user_id=1,
            resource="/api/upload",
            action="POST",
            permission=Permission.UPLOAD_FILE,
            allowed=False,
        ).model_dump(mode="json", by_alias=True)

        assert data["userId"] == 1
        assert data["permission"] == "upload:file"
        assert "requestId" in data


class TestInMemoryAuditSink:
    async def test_keeps_insertion_order(self):
        sink = InMemoryAuditSink()
        first, second = entry(user_id=1), entry(user_id=2)

        await sink.append(first)
        await sink.append(second)

        assert await sink.entries() == [first, second]

    async def test_max_entries_keeps_newest(self):
        sink = InMemoryAuditSink(max_entries=2)
        for user_id in range(5):
            await sink.append(entry(user_id=user_id))

        assert [e.user_id for e in await sink.entries()] == [3, 4]
        assert len(sink) == 2

    def test_rejects_non_positive_max_entries(self):
        with pytest.raises(ValueError):
            InMemoryAuditSink(max_entries=0)

    async def test_concurrent_appends_are_all_kept(self):
        sink = InMemoryAuditSink()

        await asyncio.gather(*(sink.append(entry(user_id=i)) for i in range(200)))

        assert len(sink) == 200

    async def test_clear(self):
        sink = InMemoryAuditSink()
        await sink.append(entry())

        await sink.clear()

        assert await sink.entries() == []


class TestAuditLogQueries:
    """Tests for AuditLog queries."""

    async def test_recent_is_newest_first(self, audit_log: AuditLog):
        for user_id in (1, 2, 3):
            await audit_log.record(entry(user_id=user_id))

        recent = await audit_log.recent()

        assert [e.user_id for e in recent] == [3, 2, 1]

    async def test_recent_limit(self, audit_log: AuditLog):
        for user_id in range(10):
            await audit_log.record(entry(user_id=user_id))

        assert [e.user_id for e in await audit_log.recent(3)] == [9, 8, 7]
        assert await audit_log.recent(0) == []

    async def test_recent_for_user(self, audit_log: AuditLog):
        await audit_log.record(entry(user_id=1, resource="/a"))
        await audit_log.record(entry(user_id=2))
        await audit_log.record(entry(user_id=1, resource="/b"))

        mine = await audit_log.recent_for_user(1)

        assert [e.resource for e in mine] == ["/b", "/a"]

    async def test_recent_denied(self, audit_log: AuditLog):
        await audit_log.record(entry(allowed=True))
        await audit_log.record(entry(allowed=False, resource="/x"))
        await audit_log.record(entry(user_id=None, role=None, allowed=False, resource="/y"))

        denied = await audit_log.recent_denied()

        assert [e.resource for e in denied] == ["/y", "/x"]

    async def test_clear(self, audit_log: AuditLog):
        await audit_log.record(entry())

        await audit_log.clear()

        assert await audit_log.recent() == []

    async def test_stats(self, audit_log: AuditLog):
        await audit_log.record(entry(role=Role.USER, allowed=True))
        await audit_log.record(entry(role=Role.USER, allowed=False))
        await audit_log.record(entry(role=Role.ADMIN, allowed=True))
        await audit_log.record(entry(user_id=None, role=None, allowed=False))

        stats = await audit_log.stats()

        assert stats.total_decisions == 4
        assert stats.allowed == 2
        assert stats.denied == 2
        assert stats.by_role[Role.USER].allowed == 1
        assert stats.by_role[Role.USER].denied == 1
        assert stats.by_role[Role.ADMIN].allowed == 1
        assert stats.by_role[Role.TEAM_LEAD] == RoleDecisionCounts(allowed=0, denied=0)
        assert set(stats.by_role) == set(Role)

    async def test_stats_on_empty_log_lists_every_role(self, audit_log: AuditLog):
        stats = await audit_log.stats()

        assert stats.total_decisions == 0
        assert all(
            counts == RoleDecisionCounts(allowed=0, denied=0)
            for counts in stats.by_role.values()
        )
        assert set(stats.by_role) == set(Role)

    async def test_record_logs_decision(self, audit_log: AuditLog):
        with patch("localpassengers.core.audit.service.log") as mock_log:
            await audit_log.record(entry(allowed=False))

        mock_log.warning.assert_called_once()
        assert mock_log.warning.call_args.args[0] == "rbac_decision"
        mock_log.info.assert_not_called()


class TestBuildAuditLog:
    def test_memory_backend(self):
        audit_log = build_audit_log(Settings(audit_backend="memory", audit_max_entries=10))

        assert isinstance(audit_log.sink, InMemoryAuditSink)
        assert audit_log.sink.max_entries == 10

    def test_redis_backend(self):
        audit_log = build_audit_log(Settings(audit_backend="redis", audit_redis_key="k"))

        assert isinstance(audit_log.sink, RedisAuditSink)
        assert audit_log.sink.key == "k"
