"""Notification infrastructure providers."""

from collections.abc import AsyncIterator

import httpx
from dishka import Scope, provide

from vouch.adapter.notification import LoggingNotificationSink, WebhookNotificationSink
from vouch.config import NotificationSettings
from vouch.domain.service import NotificationSink
from vouch.util.di.base import ProviderBase
from vouch.util.observability import instrument_httpx


class NotificationProvider(ProviderBase):
    """Notification component base."""

    __mock_component__ = "notification"


class ProdNotificationProvider(NotificationProvider):
    """Webhook sink when a relay is configured, logging sink otherwise."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    async def get_notification_sink(
        self, settings: NotificationSettings
    ) -> AsyncIterator[NotificationSink]:
        if not settings.webhook_url:
            yield LoggingNotificationSink()
            return

        instrument_httpx()
        async with httpx.AsyncClient(timeout=settings.timeout_seconds) as client:
            yield WebhookNotificationSink(
                client,
                settings.webhook_url,
                attempts=settings.delivery_attempts,
                retry_delay_seconds=settings.retry_delay_seconds,
            )
