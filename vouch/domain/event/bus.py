"""Publish/subscribe event bus."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Protocol
from uuid import uuid4

import logfire
from pydantic import BaseModel, ConfigDict
from tenacity import AsyncRetrying, RetryError, stop_after_attempt, wait_fixed

from vouch.config import EventSettings
from vouch.domain.event.store import EventStore
from vouch.domain.model.event import WILDCARD, Event

EventHandler = Callable[[Event], Awaitable[None]]
EventPredicate = Callable[[Event], bool]


class Observer(Protocol):
    """Anything that reacts to every event through one entry point."""

    name: str

    async def handle(self, event: Event) -> None: ...


class Subscription(BaseModel):
    """A (predicate, handler) registration."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str
    name: str
    predicate: EventPredicate
    handler: EventHandler
    priority: int = 0


def matches_type(event_type: str) -> EventPredicate:
    """Predicate for one event type, or every event for ``*``."""
    if event_type == WILDCARD:
        return lambda event: True
    return lambda event: event.type == event_type


class EventBus:
    """Fans events out to subscribed handlers.

    Every published event is first appended to the event store. Handlers run
    inline or, with ``async_dispatch``, in background tasks. A failing
    handler is retried with a fixed delay, then logged; it never fails the
    ``publish`` call.
    """

    def __init__(self, store: EventStore, settings: EventSettings) -> None:
        """Initialize event bus.

        Args:
            store: Event history every published event is appended to
            settings: Dispatch mode and retry policy
        """
        self.store = store
        self.settings = settings
        self.failed_deliveries = 0
        self._subscriptions: list[Subscription] = []
        self._pending: set[asyncio.Task] = set()

    def subscribe(
        self,
        event_type: str,
        handler: EventHandler,
        *,
        name: str | None = None,
        priority: int = 0,
    ) -> str:
        """Subscribe a handler to one event type, or ``*`` for all.

        Returns:
            Subscription id, for ``unsubscribe``
        """
        return self.subscribe_when(
            matches_type(event_type),
            handler,
            name=name or f"{event_type}:{getattr(handler, '__qualname__', 'handler')}",
            priority=priority,
        )

    def subscribe_when(
        self,
        predicate: EventPredicate,
        handler: EventHandler,
        *,
        name: str,
        priority: int = 0,
    ) -> str:
        """Subscribe a handler to every event the predicate accepts."""
        subscription = Subscription(
            id=str(uuid4()),
            name=name,
            predicate=predicate,
            handler=handler,
            priority=priority,
        )
        self._subscriptions.append(subscription)
        # Higher priority first; stable for equal priorities
        self._subscriptions.sort(key=lambda s: -s.priority)
        logfire.debug("Handler subscribed", subscription=name, priority=priority)
        return subscription.id

    def subscribe_observer(
        self, observer: Observer, event_type: str = WILDCARD, priority: int = 0
    ) -> str:
        return self.subscribe(
            event_type, observer.handle, name=observer.name, priority=priority
        )

    def unsubscribe(self, subscription_id: str) -> bool:
        before = len(self._subscriptions)
        self._subscriptions = [s for s in self._subscriptions if s.id != subscription_id]
        return len(self._subscriptions) < before

    def clear(self) -> None:
        self._subscriptions.clear()

    def subscriptions(self) -> list[Subscription]:
        return list(self._subscriptions)

    async def publish(self, event: Event) -> None:
        """Store the event and deliver it to every matching handler."""
        await self.store.append(event)

        matching = [s for s in self._subscriptions if s.predicate(event)]
        logfire.debug(
            "Event published",
            event_type=event.type,
            event_id=str(event.event_id),
            handlers=len(matching),
        )

        for subscription in matching:
            if self.settings.async_dispatch:
                task = asyncio.create_task(self._deliver(subscription, event))
                self._pending.add(task)
                task.add_done_callback(self._pending.discard)
            else:
                await self._deliver(subscription, event)

    async def publish_many(self, events: list[Event]) -> None:
        for event in events:
            await self.publish(event)

    async def drain(self) -> None:
        """Wait for all deferred deliveries to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def _deliver(self, subscription: Subscription, event: Event) -> None:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.settings.max_retries + 1),
            wait=wait_fixed(self.settings.retry_delay_seconds),
        )
        try:
            async for attempt in retrying:
                with attempt:
                    await subscription.handler(event)
        except RetryError as e:
            self.failed_deliveries += 1
            error = e.last_attempt.exception()
            logfire.error(
                "Event handler failed",
                subscription=subscription.name,
                event_type=event.type,
                event_id=str(event.event_id),
                attempts=self.settings.max_retries + 1,
                error=str(error),
                error_type=type(error).__name__,
            )
