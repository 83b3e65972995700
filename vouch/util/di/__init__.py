"""Dependency injection wiring for vouch.

``PROVIDERS`` lists one entry per concern. Concrete providers are used as
they are; mockable components are bases resolved to their production or
mock subclass by ``get_provider``.
"""

from typing import Type

from vouch.util.di.adapter import ProdAdapterProvider
from vouch.util.di.application import ProdApplicationProvider
from vouch.util.di.base import Component, ProviderBase
from vouch.util.di.core import ProdConfigProvider
from vouch.util.di.domain import ProdDomainProvider
from vouch.util.di.events import ProdEventProvider
from vouch.util.di.infrastructure import (
    CacheProvider,
    ClockProvider,
    NotificationProvider,
    PersistenceProvider,
    ProdCacheProvider,
    ProdClockProvider,
    ProdNotificationProvider,
    ProdPersistenceProvider,
)

PROVIDERS: list[Type[ProviderBase]] = [
    ProdConfigProvider,
    ProdAdapterProvider,
    ProdDomainProvider,
    ProdEventProvider,
    ProdApplicationProvider,
    # mockable
    PersistenceProvider,
    CacheProvider,
    NotificationProvider,
    ClockProvider,
]


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Resolve an entry of ``PROVIDERS`` to the class to instantiate.

    Args:
        base: Entry of ``PROVIDERS``
        use_mock: Pick the mock subclass of a mockable component

    Returns:
        ``base`` itself when it has no subclasses, otherwise the subclass
        whose ``__is_mock__`` equals ``use_mock``

    Raises:
        ValueError: If the component has no such implementation loaded.
            Mock subclasses only exist once ``tests.di`` is imported.
    """
    variants = {
        getattr(subclass, "__is_mock__", False): subclass
        for subclass in base.__subclasses__()
    }
    if not variants:
        return base

    try:
        return variants[use_mock]
    except KeyError:
        kind = "mock" if use_mock else "production"
        name = base.__mock_component__ or base.__name__
        raise ValueError(f"No {kind} implementation for {name}") from None


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    "ProdConfigProvider",
    "ProdAdapterProvider",
    "ProdDomainProvider",
    "ProdEventProvider",
    "ProdApplicationProvider",
    "CacheProvider",
    "ClockProvider",
    "NotificationProvider",
    "PersistenceProvider",
    "ProdCacheProvider",
    "ProdClockProvider",
    "ProdNotificationProvider",
    "ProdPersistenceProvider",
]
