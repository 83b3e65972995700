"""Bounded event history."""

from abc import ABC, abstractmethod
from collections import Counter, deque
from datetime import datetime

from vouch.domain.model.event import Event
from vouch.domain.value import IdentityId
from vouch.domain.value.common import ValueObject


class EventFilter(ValueObject):
    """Query over stored events. Unset fields match everything."""

    types: list[str] | None = None
    user_id: IdentityId | None = None
    correlation_id: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    offset: int = 0
    limit: int | None = None

    def matches(self, event: Event) -> bool:
        if self.types is not None and event.type not in self.types:
            return False
        if self.user_id is not None and event.metadata.user_id != self.user_id:
            return False
        if (
            self.correlation_id is not None
            and event.metadata.correlation_id != self.correlation_id
        ):
            return False
        if self.start is not None and event.timestamp < self.start:
            return False
        if self.end is not None and event.timestamp > self.end:
            return False
        return True


class EventStoreStats(ValueObject):
    total: int
    capacity: int
    by_type: dict[str, int]
    oldest: datetime | None = None
    newest: datetime | None = None


class EventStore(ABC):
    """Append-only event history."""

    @abstractmethod
    async def append(self, event: Event) -> None:
        pass

    @abstractmethod
    async def query(self, event_filter: EventFilter) -> list[Event]:
        """Events matching the filter, oldest first, paginated."""
        pass

    @abstractmethod
    async def count(self, event_filter: EventFilter | None = None) -> int:
        pass

    @abstractmethod
    async def clear(self) -> None:
        pass

    async def by_type(self, event_type: str, limit: int = 100) -> list[Event]:
        """Latest ``limit`` events of a type."""
        if limit <= 0:
            return []
        return (await self.query(EventFilter(types=[event_type])))[-limit:]

    async def by_user(self, user_id: IdentityId, limit: int = 100) -> list[Event]:
        """Latest ``limit`` events concerning an identity."""
        if limit <= 0:
            return []
        return (await self.query(EventFilter(user_id=user_id)))[-limit:]

    async def by_correlation(self, correlation_id: str) -> list[Event]:
        return await self.query(EventFilter(correlation_id=correlation_id))


class InMemoryEventStore(EventStore):
    """Ring buffer that evicts the oldest event once full."""

    def __init__(self, capacity: int = 10_000) -> None:
        self.capacity = capacity
        self._events: deque[Event] = deque(maxlen=capacity)

    async def append(self, event: Event) -> None:
        self._events.append(event)

    async def query(self, event_filter: EventFilter) -> list[Event]:
        matched = [event for event in self._events if event_filter.matches(event)]
        end = None if event_filter.limit is None else event_filter.offset + event_filter.limit
        return matched[event_filter.offset : end]

    async def count(self, event_filter: EventFilter | None = None) -> int:
        if event_filter is None:
            return len(self._events)
        return sum(1 for event in self._events if event_filter.matches(event))

    async def clear(self) -> None:
        self._events.clear()

    async def stats(self) -> EventStoreStats:
        by_type = Counter(event.type for event in self._events)
        return EventStoreStats(
            total=len(self._events),
            capacity=self.capacity,
            by_type=dict(by_type),
            oldest=self._events[0].timestamp if self._events else None,
            newest=self._events[-1].timestamp if self._events else None,
        )
