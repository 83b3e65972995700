"""Domain model entities for Vouch."""

from vouch.domain.model.audit import AuditEntry
from vouch.domain.model.event import Event, EventMetadata, EventType
from vouch.domain.model.identity import ExternalAccount, Identity, IdentityAccounts
from vouch.domain.model.link_request import LinkRequest, request_type_for
from vouch.domain.model.notification import NotificationIntent
from vouch.domain.model.outcome import Outcome
from vouch.domain.model.pending_auth import PendingAuthSession

__all__ = [
    "Identity",
    "ExternalAccount",
    "IdentityAccounts",
    "PendingAuthSession",
    "LinkRequest",
    "request_type_for",
    "Event",
    "EventMetadata",
    "EventType",
    "AuditEntry",
    "NotificationIntent",
    "Outcome",
]
