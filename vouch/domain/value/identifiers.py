"""Strongly typed identifiers for Vouch domain entities.

Using NewType for strong typing prevents mixing up different entity IDs
and makes the code more self-documenting.
"""

from typing import NewType
from uuid import UUID

IdentityId = NewType("IdentityId", UUID)
ExternalAccountId = NewType("ExternalAccountId", UUID)
LinkRequestId = NewType("LinkRequestId", UUID)
EventId = NewType("EventId", UUID)
AuditEntryId = NewType("AuditEntryId", UUID)
NotificationId = NewType("NotificationId", UUID)
