"""Mock clock providers for testing."""

from datetime import datetime, timedelta, timezone

from dishka import Scope, alias, provide

from vouch.util.clock import Clock
from vouch.util.di.infrastructure.clock import ClockProvider


class FrozenClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, at: datetime | None = None) -> None:
        self.current = at or datetime.now(timezone.utc).replace(microsecond=0)

    def now(self) -> datetime:
        return self.current

    def advance(self, **delta) -> datetime:
        """Move forward by ``timedelta(**delta)`` and return the new time."""
        self.current += timedelta(**delta)
        return self.current

    def set(self, at: datetime) -> None:
        self.current = at


class MockClockProvider(ClockProvider):
    """Frozen clock, reachable both as Clock and as FrozenClock."""

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_frozen_clock(self) -> FrozenClock:
        return FrozenClock()

    clock = alias(source=FrozenClock, provides=Clock)
