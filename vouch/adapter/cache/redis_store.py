"""Redis-backed rate limiter and pending-auth store.

Shared across processes, so limits and pending logins hold for every
instance behind a load balancer.
"""

import logfire
from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

from vouch.adapter.error import CacheError
from vouch.domain.model.pending_auth import PendingAuthSession
from vouch.domain.repository import PendingAuthStore
from vouch.domain.service.rate_limiter import RateLimiter
from vouch.domain.value import IdentityId


class RedisRateLimiter(RateLimiter):
    """Fixed window implemented as INCR with an expiry set on the first hit."""

    def __init__(
        self, redis: Redis, limit: int, window_seconds: int, key_prefix: str = "vouch:"
    ) -> None:
        super().__init__(limit, window_seconds)
        self.redis = redis
        self.key_prefix = f"{key_prefix}ratelimit:"

    def _key(self, identifier: str) -> str:
        return f"{self.key_prefix}{identifier}"

    async def check(self, identifier: str) -> int:
        try:
            value = await self.redis.get(self._key(identifier))
        except RedisError as e:
            logfire.error("Rate limit check failed", error=str(e))
            raise CacheError("Rate limit check failed") from e
        return int(value) if value is not None else 0

    async def increment(self, identifier: str) -> int:
        key = self._key(identifier)
        try:
            attempts = await self.redis.incr(key)
            if attempts == 1:
                # First attempt opens the window
                await self.redis.expire(key, self.window_seconds)
        except RedisError as e:
            logfire.error("Rate limit increment failed", error=str(e))
            raise CacheError("Rate limit increment failed") from e
        return int(attempts)

    async def reset(self, identifier: str) -> None:
        try:
            await self.redis.delete(self._key(identifier))
        except RedisError as e:
            logfire.error("Rate limit reset failed", error=str(e))
            raise CacheError("Rate limit reset failed") from e


class RedisPendingAuthStore(PendingAuthStore):
    """Pending sessions stored as JSON with a TTL backstop."""

    def __init__(self, redis: Redis, key_prefix: str = "vouch:") -> None:
        self.redis = redis
        self.key_prefix = f"{key_prefix}pending2fa:"

    def _key(self, identity_id: IdentityId) -> str:
        return f"{self.key_prefix}{identity_id}"

    async def save(self, session: PendingAuthSession, ttl_seconds: int) -> None:
        try:
            await self.redis.set(
                self._key(session.identity_id),
                session.model_dump_json(),
                ex=ttl_seconds,
            )
        except RedisError as e:
            logfire.error("Pending session save failed", error=str(e))
            raise CacheError("Pending session save failed") from e

    async def get(self, identity_id: IdentityId) -> PendingAuthSession | None:
        try:
            raw = await self.redis.get(self._key(identity_id))
        except RedisError as e:
            logfire.error("Pending session read failed", error=str(e))
            raise CacheError("Pending session read failed") from e
        if raw is None:
            return None
        try:
            return PendingAuthSession.model_validate_json(raw)
        except ValidationError:
            logfire.warn("Dropping unreadable pending session", identity_id=str(identity_id))
            await self.delete(identity_id)
            return None

    async def delete(self, identity_id: IdentityId) -> None:
        try:
            await self.redis.delete(self._key(identity_id))
        except RedisError as e:
            logfire.error("Pending session delete failed", error=str(e))
            raise CacheError("Pending session delete failed") from e
