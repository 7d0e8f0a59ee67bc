"""Root API router with health endpoints and module mounting."""

from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text

from localpassengers.api.dependencies import DBSession
from localpassengers.config import settings
from localpassengers.core.auth.routes import router as auth_router
from localpassengers.core.cache.redis import redis_client
from localpassengers.core.rbac.routes import router as rbac_router


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    app: str
    environment: str


health_router = APIRouter(prefix="/health", tags=["health"])


@health_router.get(
    "",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Returns 200 if the process is running.",
)
async def liveness() -> HealthResponse:
    """Liveness probe endpoint."""
    return HealthResponse(
        status="ok",
        app=settings.app_name,
        environment=settings.environment,
    )


@health_router.get(
    "/ready",
    summary="Readiness probe",
    description="Checks database connectivity, and Redis when it backs the audit log.",
)
async def readiness(db: DBSession) -> JSONResponse:
    """Readiness probe endpoint."""
    checks: dict[str, Any] = {}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = str(e)

    if settings.audit_backend == "redis":
        try:
            async with redis_client() as client:
                await client.ping()
            checks["redis"] = "ok"
        except Exception as e:
            checks["redis"] = str(e)

    all_ok = all(v == "ok" for v in checks.values())

    return JSONResponse(
        status_code=status.HTTP_200_OK
        if all_ok
        else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if all_ok else "degraded",
            "checks": checks,
        },
    )


# Everything is served under /api
api_router = APIRouter(prefix="/api")
api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(rbac_router)
