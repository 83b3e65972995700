"""Provider base shared by every vouch DI provider."""

from typing import ClassVar, Literal

from dishka import Provider

# Components with a mock twin. Everything else (config, adapters, domain
# services, the event bus, use cases) is built the same way everywhere.
Component = Literal["persistence", "cache", "notification", "clock"]


class ProviderBase(Provider):
    """Provider with the metadata the container builders select on.

    A mockable component is declared as a base carrying
    ``__mock_component__`` with exactly two subclasses, one of them
    setting ``__is_mock__``. ``__depends_on__`` names the components that
    must also be real when this one is.
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False
    __depends_on__: ClassVar[frozenset[Component]] = frozenset()
