"""Outbound notification interface."""

from abc import ABC, abstractmethod

from vouch.domain.model.notification import NotificationIntent


class NotificationSink(ABC):
    """Delivers notification intents (email or chat)."""

    @abstractmethod
    async def send(self, intent: NotificationIntent) -> None:
        """Deliver one notification.

        Raises:
            NotificationDeliveryError: If delivery failed
        """
        pass
