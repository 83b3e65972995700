"""Pending-authentication session state machine."""

from datetime import timedelta

import logfire

from vouch.domain.model.pending_auth import PendingAuthSession
from vouch.domain.repository import PendingAuthStore
from vouch.domain.value import IdentityId
from vouch.util.clock import Clock

from .base import Service


class PendingAuthService(Service):
    """Tracks first-factor logins waiting on a second factor.

    ``absent -> pending -> completed``, or ``pending -> expired``. Expiry is
    a timestamp comparison made on read; there are no timers.
    """

    def __init__(self, store: PendingAuthStore, clock: Clock, ttl_seconds: int = 300) -> None:
        """Initialize pending auth service.

        Args:
            store: Session storage (in-memory or shared)
            clock: Time source
            ttl_seconds: Lifetime of a pending session
        """
        self.store = store
        self.clock = clock
        self.ttl_seconds = ttl_seconds

    @property
    def ttl(self) -> timedelta:
        return timedelta(seconds=self.ttl_seconds)

    async def begin(self, identity_id: IdentityId, email: str) -> PendingAuthSession:
        """Open a pending session after a successful first factor.

        Replaces any earlier session for the identity.
        """
        session = PendingAuthSession(
            identity_id=identity_id, email=email, created_at=self.clock.now()
        )
        await self.store.save(session, self.ttl_seconds)
        logfire.info("Pending auth session opened", identity_id=str(identity_id))
        return session

    async def get(self, identity_id: IdentityId) -> PendingAuthSession | None:
        """Return the live session, deleting it if it has expired."""
        session = await self.store.get(identity_id)
        if session is None:
            return None
        if session.is_expired(self.clock.now(), self.ttl):
            await self.store.delete(identity_id)
            logfire.info("Pending auth session expired", identity_id=str(identity_id))
            return None
        return session

    async def mark_completed(self, identity_id: IdentityId) -> PendingAuthSession | None:
        """Mark the live session completed. Repeated calls are no-ops.

        Returns:
            The completed session, or None if there is no live session
        """
        session = await self.get(identity_id)
        if session is None:
            return None
        if session.completed:
            return session

        completed = session.model_copy(
            update={"completed": True, "completed_at": self.clock.now()}
        )
        remaining = self.ttl - (self.clock.now() - session.created_at)
        await self.store.save(completed, max(int(remaining.total_seconds()), 1))
        logfire.info("Pending auth session completed", identity_id=str(identity_id))
        return completed

    async def get_completed(self, identity_id: IdentityId) -> PendingAuthSession | None:
        """Live session that has passed the second factor, for finalization."""
        session = await self.get(identity_id)
        if session is None or not session.completed:
            return None
        return session
