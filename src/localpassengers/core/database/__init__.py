"""Database layer - session management and base models."""

from localpassengers.core.database.base import Base, TimestampMixin
from localpassengers.core.database.session import (
    async_engine,
    async_session_factory,
    dispose_engine,
    get_db,
)


__all__ = [
    "Base",
    "TimestampMixin",
    "async_engine",
    "async_session_factory",
    "dispose_engine",
    "get_db",
]
