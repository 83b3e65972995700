"""Outbound notification intent."""

from datetime import datetime
from typing import Any

from pydantic import Field

from vouch.domain.model.common import DomainModel
from vouch.domain.value import (
    EventId,
    NotificationChannel,
    NotificationId,
    NotificationPriority,
    NotificationStatus,
)


class NotificationIntent(DomainModel):
    """A message to deliver through a notification sink.

    ``recipient`` is an email address for the email channel and a channel
    name (e.g. ``#security-alerts``) for chat.
    """

    id: NotificationId
    channel: NotificationChannel
    recipient: str
    subject: str
    body: str
    priority: NotificationPriority = NotificationPriority.NORMAL
    status: NotificationStatus = NotificationStatus.PENDING
    event_id: EventId | None = None
    event_type: str | None = None
    created_at: datetime
    sent_at: datetime | None = None
    error: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
