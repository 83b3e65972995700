"""Event bus and event history."""

from vouch.domain.event.bus import (
    EventBus,
    EventHandler,
    EventPredicate,
    Observer,
    Subscription,
    matches_type,
)
from vouch.domain.event.store import (
    EventFilter,
    EventStore,
    EventStoreStats,
    InMemoryEventStore,
)

__all__ = [
    "EventBus",
    "EventHandler",
    "EventPredicate",
    "Observer",
    "Subscription",
    "matches_type",
    "EventFilter",
    "EventStore",
    "EventStoreStats",
    "InMemoryEventStore",
]
