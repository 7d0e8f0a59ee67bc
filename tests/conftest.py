"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
from fastapi import APIRouter, FastAPI, Request
from httpx import ASGITransport, AsyncClient

from localpassengers.core.audit import AuditLog, InMemoryAuditSink
from localpassengers.core.auth.dependencies import OptionalIdentity
from localpassengers.core.rbac.roles import Role
from localpassengers.main import create_app
from localpassengers.modules.users.models import User
from localpassengers.modules.users.repos import get_user_directory
from tests.fakes import InMemoryUserDirectory


# ============================================================
# Downstream probe routes
# ============================================================
#
# Stand-ins for the CRUD handlers that sit behind the authorization
# middleware. Each one echoes the identity it was handed.

probe_router = APIRouter()


def _echo(request: Request, identity: OptionalIdentity) -> dict[str, Any]:
    return {
        "headers": {
            "userId": request.headers.get("x-user-id"),
            "email": request.headers.get("x-user-email"),
            "role": request.headers.get("x-user-role"),
        },
        "identity": identity.model_dump(by_alias=True) if identity else None,
    }


@probe_router.get("/api/admin/dashboard")
async def admin_dashboard(request: Request, identity: OptionalIdentity) -> dict[str, Any]:
    return _echo(request, identity)


@probe_router.get("/api/station-master/board")
async def station_master_board(request: Request, identity: OptionalIdentity) -> dict[str, Any]:
    return _echo(request, identity)


@probe_router.get("/api/trains/manage/schedule")
async def manage_schedule(request: Request, identity: OptionalIdentity) -> dict[str, Any]:
    return _echo(request, identity)


@probe_router.get("/api/trains/{train_id}")
async def get_train(train_id: int, request: Request, identity: OptionalIdentity) -> dict[str, Any]:
    return _echo(request, identity)


@probe_router.api_route("/api/files", methods=["GET", "POST"])
async def files(request: Request, identity: OptionalIdentity) -> dict[str, Any]:
    return _echo(request, identity)


@probe_router.post("/api/upload")
async def upload(request: Request, identity: OptionalIdentity) -> dict[str, Any]:
    return _echo(request, identity)


@probe_router.get("/public/ping")
async def public_ping(request: Request, identity: OptionalIdentity) -> dict[str, Any]:
    return _echo(request, identity)


# ============================================================
# Application Fixtures
# ============================================================


@pytest.fixture
def audit_log() -> AuditLog:
    """Fresh in-memory audit log per test."""
    return AuditLog(InMemoryAuditSink())


@pytest.fixture
def users() -> InMemoryUserDirectory:
    """User directory seeded with one user per role of interest."""
    directory = InMemoryUserDirectory()
    directory.add("admin@lprail.com", Role.ADMIN, name="Ada Admin", user_id=1)
    directory.add(
        "master@lprail.com", Role.STATION_MASTER, name="Sam Master", user_id=2
    )
    directory.add("rider@lprail.com", Role.USER, name="Riley Rider", user_id=3)
    directory.add(
        "gone@lprail.com", Role.USER, name="Inactive", user_id=4, is_active=False
    )
    return directory


@pytest.fixture
def app(audit_log: AuditLog, users: InMemoryUserDirectory) -> FastAPI:
    """Create test application instance."""
    application = create_app(audit_log=audit_log)
    application.include_router(probe_router)
    application.dependency_overrides[get_user_directory] = lambda: users

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
async def admin(users: InMemoryUserDirectory) -> User:
    user = await users.get_by_id(1)
    assert user is not None
    return user


@pytest.fixture
async def rider(users: InMemoryUserDirectory) -> User:
    user = await users.get_by_id(3)
    assert user is not None
    return user
