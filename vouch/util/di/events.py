"""Event bus and observer DI providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide

from vouch.application.observer import (
    AnalyticsObserver,
    AuditLogObserver,
    NotificationObserver,
    register_observers,
)
from vouch.config import EventSettings, NotificationSettings
from vouch.domain.event import EventBus, EventStore, InMemoryEventStore
from vouch.domain.repository import AuditRecordRepository
from vouch.domain.service import NotificationSink
from vouch.util.clock import Clock
from vouch.util.di.base import ProviderBase


class ProdEventProvider(ProviderBase):
    """One event bus per container, with the observers subscribed at ``*``."""

    scope = Scope.APP

    @provide
    def get_event_store(self, settings: EventSettings) -> EventStore:
        return InMemoryEventStore(capacity=settings.store_capacity)

    @provide
    def get_audit_log_observer(
        self,
        clock: Clock,
        repository: AuditRecordRepository,
        settings: EventSettings,
    ) -> AuditLogObserver:
        return AuditLogObserver(
            clock=clock, repository=repository, max_entries=settings.audit_history
        )

    @provide
    def get_analytics_observer(self, settings: EventSettings) -> AnalyticsObserver:
        return AnalyticsObserver(max_metrics=settings.metric_history)

    @provide
    def get_notification_observer(
        self,
        sink: NotificationSink,
        notification_settings: NotificationSettings,
        event_settings: EventSettings,
        clock: Clock,
    ) -> NotificationObserver:
        return NotificationObserver(
            sink=sink,
            settings=notification_settings,
            clock=clock,
            max_history=event_settings.notification_history,
        )

    @provide
    async def get_event_bus(
        self,
        store: EventStore,
        settings: EventSettings,
        audit_log: AuditLogObserver,
        analytics: AnalyticsObserver,
        notification: NotificationObserver,
    ) -> AsyncIterator[EventBus]:
        """Provide the event bus.

        On shutdown deferred deliveries finish first, then queued emails are
        sent so none are lost with the process.
        """
        bus = EventBus(store=store, settings=settings)
        register_observers(bus, audit_log, analytics, notification)
        yield bus
        await bus.drain()
        while notification.queued:
            await notification.flush()
