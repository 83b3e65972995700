"""Mockable infrastructure components.

Each module defines a component base and its production subclass. Mock
subclasses live in ``tests.di`` and register themselves on import.
"""

from .cache import CacheProvider, ProdCacheProvider
from .clock import ClockProvider, ProdClockProvider
from .notification import NotificationProvider, ProdNotificationProvider
from .persistence import PersistenceProvider, ProdPersistenceProvider

__all__ = [
    "CacheProvider",
    "ClockProvider",
    "NotificationProvider",
    "PersistenceProvider",
    "ProdCacheProvider",
    "ProdClockProvider",
    "ProdNotificationProvider",
    "ProdPersistenceProvider",
]
