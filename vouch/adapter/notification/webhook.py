"""Webhook notification sink."""

import httpx
import logfire
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_fixed,
)

from vouch.adapter.error import NotificationDeliveryError
from vouch.domain.model.notification import NotificationIntent
from vouch.domain.service.notification import NotificationSink


def _is_transient(error: BaseException) -> bool:
    # Relay down or overloaded; a 4xx means the intent itself was refused
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code >= 500
    return isinstance(error, httpx.TransportError)


class WebhookNotificationSink(NotificationSink):
    """Posts notification intents as JSON to a delivery relay.

    The relay owns the actual email and chat transports. Connection errors
    and 5xx answers are retried up to ``attempts`` times in total.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        attempts: int = 1,
        retry_delay_seconds: float = 0.0,
    ) -> None:
        """Initialize webhook sink.

        Args:
            client: Shared HTTP client
            url: Relay endpoint
            attempts: Total tries per intent
            retry_delay_seconds: Pause between tries
        """
        self.client = client
        self.url = url
        self.attempts = attempts
        self.retry_delay_seconds = retry_delay_seconds

    async def send(self, intent: NotificationIntent) -> None:
        with logfire.span(
            "webhook_sink.send", channel=intent.channel.value, event_type=intent.event_type
        ):
            try:
                async for attempt in AsyncRetrying(
                    stop=stop_after_attempt(self.attempts),
                    wait=wait_fixed(self.retry_delay_seconds),
                    retry=retry_if_exception(_is_transient),
                    reraise=True,
                ):
                    with attempt:
                        await self._post(intent)
            except httpx.HTTPError as e:
                raise NotificationDeliveryError(
                    f"Notification relay rejected {intent.id}: {e}"
                ) from e

    async def _post(self, intent: NotificationIntent) -> None:
        response = await self.client.post(self.url, json=intent.model_dump(mode="json"))
        response.raise_for_status()
