"""In-process rate limiter and pending-auth store.

Single-instance deployments and tests only: state lives in this process.
"""

from datetime import datetime, timedelta

from pydantic import BaseModel

from vouch.domain.model.pending_auth import PendingAuthSession
from vouch.domain.repository import PendingAuthStore
from vouch.domain.service.rate_limiter import RateLimiter
from vouch.domain.value import IdentityId
from vouch.util.clock import Clock


class _Window(BaseModel):
    started_at: datetime
    attempts: int


class InMemoryRateLimiter(RateLimiter):
    """Fixed-window counter held in a dict, evicted lazily."""

    def __init__(self, limit: int, window_seconds: int, clock: Clock) -> None:
        super().__init__(limit, window_seconds)
        self.clock = clock
        self._windows: dict[str, _Window] = {}

    def _live_window(self, identifier: str) -> _Window | None:
        window = self._windows.get(identifier)
        if window is None:
            return None
        if self.clock.now() - window.started_at >= timedelta(seconds=self.window_seconds):
            del self._windows[identifier]
            return None
        return window

    async def check(self, identifier: str) -> int:
        window = self._live_window(identifier)
        return window.attempts if window else 0

    async def increment(self, identifier: str) -> int:
        window = self._live_window(identifier)
        if window is None:
            window = _Window(started_at=self.clock.now(), attempts=0)
            self._windows[identifier] = window
        window.attempts += 1
        return window.attempts

    async def reset(self, identifier: str) -> None:
        self._windows.pop(identifier, None)


class InMemoryPendingAuthStore(PendingAuthStore):
    """Pending sessions in a dict keyed by identity id."""

    def __init__(self) -> None:
        self._sessions: dict[IdentityId, PendingAuthSession] = {}

    async def save(self, session: PendingAuthSession, ttl_seconds: int) -> None:
        self._sessions[session.identity_id] = session

    async def get(self, identity_id: IdentityId) -> PendingAuthSession | None:
        return self._sessions.get(identity_id)

    async def delete(self, identity_id: IdentityId) -> None:
        self._sessions.pop(identity_id, None)
