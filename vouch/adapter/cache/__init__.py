"""Rate limiter and pending-auth store implementations."""

from .inmemory import InMemoryPendingAuthStore, InMemoryRateLimiter
from .redis_store import RedisPendingAuthStore, RedisRateLimiter

__all__ = [
    "InMemoryPendingAuthStore",
    "InMemoryRateLimiter",
    "RedisPendingAuthStore",
    "RedisRateLimiter",
]
