"""Clock providers."""

from dishka import Scope, provide

from vouch.util.clock import Clock
from vouch.util.di.base import ProviderBase


class ClockProvider(ProviderBase):
    """Clock component base."""

    __mock_component__ = "clock"


class ProdClockProvider(ClockProvider):
    """Wall clock in UTC."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_clock(self) -> Clock:
        return Clock()
