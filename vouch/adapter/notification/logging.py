"""Notification sink that only logs."""

import logfire

from vouch.domain.model.notification import NotificationIntent
from vouch.domain.service.notification import NotificationSink


class LoggingNotificationSink(NotificationSink):
    """Used when no delivery relay is configured."""

    async def send(self, intent: NotificationIntent) -> None:
        logfire.info(
            "Notification (not delivered, no relay configured)",
            channel=intent.channel.value,
            recipient=intent.recipient,
            subject=intent.subject,
            priority=intent.priority.value,
        )
