"""Link request entity.

Single-use token authorizing the attachment of an external provider
account to an existing identity.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import Field

from vouch.domain.model.common import DomainModel
from vouch.domain.value import IdentityId, LinkRequestId

REQUEST_TYPE_PREFIX = "link_"


def request_type_for(provider: str) -> str:
    """Request type recorded for a link to ``provider`` (e.g. ``link_google``)."""
    return f"{REQUEST_TYPE_PREFIX}{provider}"


class LinkRequest(DomainModel):
    """Issued link token and its state.

    Consumable once, before ``expires_at``, and only for the provider encoded
    in ``request_type``.
    """

    id: LinkRequestId
    identity_id: IdentityId
    token: str
    request_type: str
    expires_at: datetime
    completed: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def provider(self) -> str:
        return self.request_type.removeprefix(REQUEST_TYPE_PREFIX)

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def is_for(self, provider: str) -> bool:
        return self.request_type == request_type_for(provider)
