"""Audit entry entity."""

from datetime import datetime
from typing import Any

from pydantic import Field

from vouch.domain.model.common import DomainModel
from vouch.domain.value import AuditEntryId, AuditSeverity, EventId, IdentityId


class AuditEntry(DomainModel):
    """One audited action, derived from a published event."""

    id: AuditEntryId
    event_id: EventId
    event_type: str
    action: str
    severity: AuditSeverity
    timestamp: datetime
    identity_id: IdentityId | None = None
    correlation_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
