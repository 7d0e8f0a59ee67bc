"""Redis connection management."""

from localpassengers.core.cache.redis import close_redis_pool, redis_client


__all__ = ["close_redis_pool", "redis_client"]
