"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from localpassengers.api.router import api_router
from localpassengers.config import settings
from localpassengers.core.audit import AuditLog, build_audit_log
from localpassengers.core.auth.middleware import (
    AuthorizationMiddleware,
    HttpsRedirectMiddleware,
    RequestIdMiddleware,
)
from localpassengers.core.auth.routing import RouteTable
from localpassengers.core.cache.redis import close_redis_pool
from localpassengers.core.constants import REQUEST_ID_HEADER
from localpassengers.core.database import dispose_engine
from localpassengers.core.errors import register_exception_handlers
from localpassengers.core.logging import RequestLoggingMiddleware, configure_logging


configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Handles startup and shutdown events.
    """
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        environment=settings.environment,
        audit_backend=settings.audit_backend,
    )

    yield

    logger.info("application_shutdown")

    await close_redis_pool()
    logger.info("redis_pool_closed")

    await dispose_engine()
    logger.info("database_engine_disposed")


def create_app(
    audit_log: AuditLog | None = None,
    route_table: RouteTable | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        audit_log: Audit log to record authorization decisions in. Defaults
            to the backend selected by ``AUDIT_BACKEND``.
        route_table: Authorization rules. Defaults to the API's route groups.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title=settings.app_name,
        description="Access layer for the LocalPassengers train-passenger API",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
        # Disable docs in production
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
    )

    app.state.audit_log = audit_log if audit_log is not None else build_audit_log(settings)

    # Middleware added first runs last. Request order:
    # RequestId -> RequestLogging -> HttpsRedirect -> CORS -> Authorization
    app.add_middleware(
        AuthorizationMiddleware,
        audit_log=app.state.audit_log,
        route_table=route_table,
    )

    cors_origins = settings.cors_origins
    if settings.is_development and not cors_origins:
        cors_origins = ["http://localhost:3000", "http://localhost:5173"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )

    if settings.force_https and settings.is_production:
        app.add_middleware(HttpsRedirectMiddleware)

    app.add_middleware(RequestLoggingMiddleware)

    # Outermost, so every log line and error body carries the request ID
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router)

    return app
