"""Pending-authentication store interface."""

from abc import ABC, abstractmethod
from typing import Optional

from vouch.domain.model.pending_auth import PendingAuthSession
from vouch.domain.value import IdentityId


class PendingAuthStore(ABC):
    """Keyed storage for pending-authentication sessions.

    Stores do not interpret expiry; PendingAuthService does. ``ttl_seconds``
    lets networked stores drop records that are never read again.
    """

    @abstractmethod
    async def save(self, session: PendingAuthSession, ttl_seconds: int) -> None:
        """Store a session, replacing any existing one for the identity."""
        pass

    @abstractmethod
    async def get(self, identity_id: IdentityId) -> Optional[PendingAuthSession]:
        """Return the stored session, if any."""
        pass

    @abstractmethod
    async def delete(self, identity_id: IdentityId) -> None:
        """Remove the session for an identity."""
        pass
