"""Mock providers for testing."""

from .cache import MockCacheProvider
from .clock import FrozenClock, MockClockProvider
from .notification import MockNotificationProvider, RecordingNotificationSink
from .persistence import MockPersistenceProvider
from .container import build_test_container

__all__ = [
    "FrozenClock",
    "MockCacheProvider",
    "MockClockProvider",
    "MockNotificationProvider",
    "MockPersistenceProvider",
    "RecordingNotificationSink",
    "build_test_container",
]
