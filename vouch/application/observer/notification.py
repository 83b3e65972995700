"""Notification observer."""

from collections import Counter, deque
from uuid import uuid4

import logfire

from vouch.config import NotificationSettings
from vouch.domain.model.event import Event, EventType
from vouch.domain.model.notification import NotificationIntent
from vouch.domain.service.notification import NotificationSink
from vouch.domain.value import (
    AuditSeverity,
    NotificationChannel,
    NotificationId,
    NotificationPriority,
    NotificationStatus,
    ThreatLevel,
)
from vouch.domain.value.common import ValueObject
from vouch.util.clock import Clock


class NotificationFilter(ValueObject):
    channel: NotificationChannel | None = None
    status: NotificationStatus | None = None
    recipient: str | None = None
    limit: int | None = None


class NotificationStats(ValueObject):
    total: int
    queued: int
    by_status: dict[str, int]
    by_channel: dict[str, int]


class NotificationObserver:
    """Maps selected events to outbound notifications.

    Account emails (registration, password change, reset request, lock) are
    queued and delivered by ``flush``. Chat alerts for high or critical
    threats and critical system errors go out immediately. A failed delivery
    is logged and kept in history as ``failed``; it is never raised to the
    event bus.
    """

    name = "notification"

    def __init__(
        self,
        sink: NotificationSink,
        settings: NotificationSettings,
        clock: Clock,
        max_history: int = 1_000,
    ) -> None:
        """Initialize notification observer.

        Args:
            sink: Delivery target
            settings: Channels, sender and batch size
            clock: Time source for created/sent timestamps
            max_history: Size of the delivered/failed history
        """
        self.sink = sink
        self.settings = settings
        self.clock = clock
        self._queue: deque[NotificationIntent] = deque()
        self._history: deque[NotificationIntent] = deque(maxlen=max_history)

    async def handle(self, event: Event) -> None:
        intent = self.build_intent(event)
        if intent is None:
            return

        if intent.channel == NotificationChannel.CHAT:
            await self._deliver(intent)
        else:
            self._queue.append(intent)
            logfire.debug(
                "Notification queued", event_type=event.type, queued=len(self._queue)
            )

    def build_intent(self, event: Event) -> NotificationIntent | None:
        """Notification for an event, or None if the event does not notify."""
        payload = event.payload
        kind = event.type

        if kind == EventType.USER_REGISTERED:
            return self._email(
                event,
                payload.email,
                "Welcome to Vouch",
                f"Hi {payload.name or payload.email}, your account is ready.",
            )
        if kind == EventType.USER_PASSWORD_CHANGED:
            return self._email(
                event,
                payload.email,
                "Your password was changed",
                "If you did not make this change, reset your password now.",
                NotificationPriority.HIGH,
            )
        if kind == EventType.USER_PASSWORD_RESET_REQUESTED:
            return self._email(
                event,
                payload.email,
                "Password reset requested",
                "Use the link we sent to choose a new password.",
                NotificationPriority.HIGH,
                {"expires_at": payload.expires_at.isoformat() if payload.expires_at else None},
            )
        if kind == EventType.SECURITY_ACCOUNT_LOCKED:
            return self._email(
                event,
                payload.email,
                "Your account was locked",
                f"Too many failed sign-in attempts. Sign-in is blocked until "
                f"{payload.locked_until.isoformat()}.",
                NotificationPriority.URGENT,
                {"failed_attempts": payload.failed_attempts},
            )
        if kind == EventType.SECURITY_SUSPICIOUS_ACTIVITY and payload.severity in (
            ThreatLevel.HIGH,
            ThreatLevel.CRITICAL,
        ):
            return self._chat(
                event,
                self.settings.security_channel,
                f"Suspicious activity: {payload.activity}",
                f"Severity {payload.severity.value}",
                payload.details,
            )
        if kind == EventType.SECURITY_ALERT and payload.severity == AuditSeverity.CRITICAL:
            return self._chat(
                event,
                self.settings.security_channel,
                f"Security alert: {payload.alert_type}",
                payload.message,
                payload.details,
            )
        if kind == EventType.SYSTEM_ERROR_OCCURRED and payload.severity == AuditSeverity.CRITICAL:
            return self._chat(
                event,
                self.settings.system_channel,
                f"Critical error: {payload.error_type}",
                payload.error,
                payload.context,
            )
        return None

    def _email(self, event, recipient, subject, body, priority=NotificationPriority.NORMAL, data=None):
        return self._intent(
            event, NotificationChannel.EMAIL, recipient, subject, body, priority, data
        )

    def _chat(self, event, channel, subject, body, data):
        return self._intent(
            event,
            NotificationChannel.CHAT,
            channel,
            subject,
            body,
            NotificationPriority.URGENT,
            data,
        )

    def _intent(self, event, channel, recipient, subject, body, priority, data):
        return NotificationIntent(
            id=NotificationId(uuid4()),
            channel=channel,
            recipient=recipient,
            subject=subject,
            body=body,
            priority=priority,
            event_id=event.event_id,
            event_type=event.type,
            created_at=self.clock.now(),
            data={"sender": self.settings.sender, **(data or {})},
        )

    async def flush(self, batch_size: int | None = None) -> list[NotificationIntent]:
        """Deliver up to ``batch_size`` queued notifications, oldest first.

        Returns:
            The processed notifications with their final status
        """
        size = batch_size or self.settings.batch_size
        batch = [self._queue.popleft() for _ in range(min(size, len(self._queue)))]

        with logfire.span("notification_observer.flush", batch=len(batch)):
            return [await self._deliver(intent) for intent in batch]

    async def _deliver(self, intent: NotificationIntent) -> NotificationIntent:
        try:
            await self.sink.send(intent)
        except Exception as e:
            logfire.error(
                "Notification delivery failed",
                notification_id=str(intent.id),
                channel=intent.channel.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            result = intent.model_copy(
                update={"status": NotificationStatus.FAILED, "error": str(e)}
            )
        else:
            result = intent.model_copy(
                update={"status": NotificationStatus.SENT, "sent_at": self.clock.now()}
            )

        self._history.append(result)
        return result

    @property
    def queued(self) -> list[NotificationIntent]:
        return list(self._queue)

    def notifications(
        self, notification_filter: NotificationFilter | None = None
    ) -> list[NotificationIntent]:
        """Delivered and failed notifications, newest first."""
        f = notification_filter or NotificationFilter()
        matched = [
            n
            for n in reversed(self._history)
            if (f.channel is None or n.channel == f.channel)
            and (f.status is None or n.status == f.status)
            and (f.recipient is None or n.recipient == f.recipient)
        ]
        return matched[: f.limit] if f.limit is not None else matched

    def stats(self) -> NotificationStats:
        return NotificationStats(
            total=len(self._history),
            queued=len(self._queue),
            by_status=dict(Counter(n.status.value for n in self._history)),
            by_channel=dict(Counter(n.channel.value for n in self._history)),
        )
