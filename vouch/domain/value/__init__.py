"""Domain value objects for Vouch."""

from vouch.domain.value.identifiers import (
    AuditEntryId,
    EventId,
    ExternalAccountId,
    IdentityId,
    LinkRequestId,
    NotificationId,
)
from vouch.domain.value.types import (
    FAILURE_MESSAGES,
    AuditSeverity,
    AuthMethod,
    AuthProvider,
    Email,
    FailureReason,
    NotificationChannel,
    NotificationPriority,
    NotificationStatus,
    RequestContext,
    Role,
    SecondFactorMethod,
    ThreatLevel,
)

__all__ = [
    # Identifiers
    "IdentityId",
    "ExternalAccountId",
    "LinkRequestId",
    "EventId",
    "AuditEntryId",
    "NotificationId",
    # Types
    "AuthProvider",
    "AuthMethod",
    "Role",
    "SecondFactorMethod",
    "FailureReason",
    "FAILURE_MESSAGES",
    "AuditSeverity",
    "ThreatLevel",
    "NotificationChannel",
    "NotificationPriority",
    "NotificationStatus",
    "Email",
    "RequestContext",
]
