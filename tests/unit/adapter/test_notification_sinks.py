"""Unit tests for the notification sinks."""

import json
from datetime import datetime, timezone
from uuid import uuid4

import httpx
import pytest

from vouch.adapter.error import NotificationDeliveryError
from vouch.adapter.notification import LoggingNotificationSink, WebhookNotificationSink
from vouch.domain.model.notification import NotificationIntent
from vouch.domain.value import NotificationChannel, NotificationId, NotificationPriority

RELAY_URL = "https://relay.example.com/notify"


def _intent() -> NotificationIntent:
    return NotificationIntent(
        id=NotificationId(uuid4()),
        channel=NotificationChannel.CHAT,
        recipient="#security-alerts",
        subject="Suspicious activity: brute_force",
        body="Severity high",
        priority=NotificationPriority.URGENT,
        event_type="security.suspicious_activity",
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


class TestWebhookNotificationSink:
    """Tests for WebhookNotificationSink."""

    @pytest.mark.asyncio
    async def test_posts_intent_as_json(self):
        """The intent should be posted to the relay as JSON."""
        # Arrange
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(202)

        intent = _intent()
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            sink = WebhookNotificationSink(client, RELAY_URL)

            # Act
            await sink.send(intent)

        # Assert
        assert len(requests) == 1
        assert str(requests[0].url) == RELAY_URL
        body = json.loads(requests[0].content)
        assert body["id"] == str(intent.id)
        assert body["channel"] == "chat"
        assert body["recipient"] == "#security-alerts"

    @pytest.mark.asyncio
    async def test_error_status_raises_delivery_error(self):
        """A non-2xx answer from the relay should raise NotificationDeliveryError."""
        # Arrange
        transport = httpx.MockTransport(lambda request: httpx.Response(503))

        async with httpx.AsyncClient(transport=transport) as client:
            sink = WebhookNotificationSink(client, RELAY_URL)

            # Act & Assert
            with pytest.raises(NotificationDeliveryError):
                await sink.send(_intent())

    @pytest.mark.asyncio
    async def test_transport_failure_raises_delivery_error(self):
        """A connection failure should raise NotificationDeliveryError."""
        # Arrange
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            sink = WebhookNotificationSink(client, RELAY_URL)

            # Act & Assert
            with pytest.raises(NotificationDeliveryError):
                await sink.send(_intent())

    @pytest.mark.asyncio
    async def test_transient_failure_is_retried(self):
        """A 5xx followed by success should deliver on the second try."""
        # Arrange
        statuses = iter([503, 202])
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(next(statuses))

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            sink = WebhookNotificationSink(client, RELAY_URL, attempts=3)

            # Act
            await sink.send(_intent())

        # Assert
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self):
        """A 4xx means the relay refused the intent; retrying would not help."""
        # Arrange
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(422)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            sink = WebhookNotificationSink(client, RELAY_URL, attempts=3)

            # Act & Assert
            with pytest.raises(NotificationDeliveryError):
                await sink.send(_intent())
        assert len(calls) == 1


class TestLoggingNotificationSink:
    """Tests for LoggingNotificationSink."""

    @pytest.mark.asyncio
    async def test_send_does_not_raise(self):
        """Logging delivery should always succeed."""
        # Arrange
        sink = LoggingNotificationSink()

        # Act & Assert
        await sink.send(_intent())
