"""Cache infrastructure providers (rate limiting and pending logins)."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
from redis.asyncio import Redis

from vouch.adapter.cache import RedisPendingAuthStore, RedisRateLimiter
from vouch.config import AuthSettings, CacheSettings
from vouch.domain.repository import PendingAuthStore
from vouch.domain.service import RateLimiter
from vouch.util.di.base import ProviderBase
from vouch.util.observability import instrument_redis


class CacheProvider(ProviderBase):
    """Cache component base."""

    __mock_component__ = "cache"


class ProdCacheProvider(CacheProvider):
    """Production cache provider using Redis, shared across processes."""

    __is_mock__ = False

    scope = Scope.APP

    @provide
    async def get_redis(self, cache_settings: CacheSettings) -> AsyncIterator[Redis]:
        """Provide Redis client, closed with the container."""
        instrument_redis()
        client = Redis.from_url(cache_settings.redis_url, decode_responses=True)
        yield client
        await client.aclose()

    @provide
    def get_rate_limiter(
        self, redis: Redis, auth_settings: AuthSettings, cache_settings: CacheSettings
    ) -> RateLimiter:
        return RedisRateLimiter(
            redis,
            limit=auth_settings.rate_limit_attempts,
            window_seconds=auth_settings.rate_limit_window_seconds,
            key_prefix=cache_settings.key_prefix,
        )

    @provide
    def get_pending_auth_store(
        self, redis: Redis, cache_settings: CacheSettings
    ) -> PendingAuthStore:
        return RedisPendingAuthStore(redis, key_prefix=cache_settings.key_prefix)
