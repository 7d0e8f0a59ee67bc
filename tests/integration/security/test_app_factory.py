"""Tests for application wiring."""

import pytest
from httpx import ASGITransport, AsyncClient

from localpassengers.core.audit import AuditLog, InMemoryAuditSink
from localpassengers.core.auth.routing import AccessLevel, RouteRule, RouteTable
from localpassengers.main import create_app


pytestmark = pytest.mark.integration


def test_default_audit_log_is_in_memory():
    app = create_app()

    assert isinstance(app.state.audit_log, AuditLog)
    assert isinstance(app.state.audit_log.sink, InMemoryAuditSink)


def test_injected_audit_log_is_used():
    audit_log = AuditLog(InMemoryAuditSink(max_entries=5))

    app = create_app(audit_log=audit_log)

    assert app.state.audit_log is audit_log


async def test_custom_route_table():
    table = RouteTable([RouteRule("/api/health", AccessLevel.AUTHENTICATED)])
    app = create_app(route_table=table)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/health")

    assert response.status_code == 401
    assert response.json()["errorCode"] == "AUTH_TOKEN_MISSING"


async def test_health(client: AsyncClient):
    response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
