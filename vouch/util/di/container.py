"""Production container."""

from dishka import AsyncContainer, make_async_container
import logfire

from vouch.config import Settings
from vouch.util.di import PROVIDERS, get_provider
from vouch.util.di.core import FixedSettingsProvider


def create_container(settings: Settings | None = None) -> AsyncContainer:
    """Build the container with every production implementation.

    Args:
        settings: Already loaded settings. When omitted, settings are read
            from the environment on first use.

    Returns:
        Container whose APP scope owns the engine, redis client and bus
    """
    providers = [get_provider(base, use_mock=False)() for base in PROVIDERS]
    if settings is not None:
        providers.append(FixedSettingsProvider(settings))

    logfire.debug(
        "Container built",
        providers=[type(p).__name__ for p in providers],
        fixed_settings=settings is not None,
    )
    return make_async_container(*providers)
