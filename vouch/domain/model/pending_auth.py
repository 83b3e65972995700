"""Pending-authentication session.

Bridges a verified first factor to a still-outstanding second factor.
"""

from datetime import datetime, timedelta

from vouch.domain.model.common import DomainModel
from vouch.domain.value import IdentityId


class PendingAuthSession(DomainModel):
    """First factor passed, second factor outstanding.

    Keyed by identity id. A completed session is kept (not deleted) until it
    ages out, so duplicate finalize calls see the same completed state.
    """

    identity_id: IdentityId
    email: str
    created_at: datetime
    completed: bool = False
    completed_at: datetime | None = None

    def is_expired(self, now: datetime, ttl: timedelta) -> bool:
        return now - self.created_at > ttl
