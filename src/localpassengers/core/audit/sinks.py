"""Storage backends for the audit log.

A sink only stores entries in insertion order. Ordering, filtering and
aggregation live in ``AuditLog``.
"""

import threading
from collections import deque
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol

from localpassengers.core.audit.models import AuditEntry
from localpassengers.core.cache.redis import redis_client


class AuditSink(Protocol):
    """Append-only store of audit entries."""

    async def append(self, entry: AuditEntry) -> None: ...

    async def entries(self) -> list[AuditEntry]:
        """Return all stored entries, oldest first."""
        ...

    async def clear(self) -> None: ...


class InMemoryAuditSink:
    """Process-local sink backed by a deque.

    The deque is guarded by a lock so appends from concurrent requests
    (including ones served from worker threads) never interleave.

    Args:
        max_entries: Keep only the newest N entries. None means unbounded.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._entries: deque[AuditEntry] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    async def append(self, entry: AuditEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    async def entries(self) -> list[AuditEntry]:
        with self._lock:
            return list(self._entries)

    async def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisAuditSink:
    """Sink that stores entries as JSON on a Redis list.

    Entries survive restarts and are shared between workers. ``RPUSH`` keeps
    insertion order; when ``max_entries`` is set the list is trimmed to the
    newest entries after each append.

    Args:
        key: Redis key of the list
        max_entries: Optional cap on the list length
        client_factory: Async context manager factory yielding a Redis
            client. Defaults to the shared connection pool.
    """

    def __init__(
        self,
        key: str,
        max_entries: int | None = None,
        client_factory: Callable[[], AbstractAsyncContextManager[Any]] = redis_client,
    ) -> None:
        self.key = key
        self.max_entries = max_entries
        self._client_factory = client_factory

    async def append(self, entry: AuditEntry) -> None:
        async with self._client_factory() as client:
            await client.rpush(self.key, entry.model_dump_json())
            if self.max_entries is not None:
                await client.ltrim(self.key, -self.max_entries, -1)

    async def entries(self) -> list[AuditEntry]:
        async with self._client_factory() as client:
            raw_entries = await client.lrange(self.key, 0, -1)
        return [AuditEntry.model_validate_json(raw) for raw in raw_entries]

    async def clear(self) -> None:
        async with self._client_factory() as client:
            await client.delete(self.key)
