"""Configuration providers."""

from dishka import Scope, provide

from vouch.config import (
    AuthSettings,
    CacheSettings,
    EventSettings,
    NotificationSettings,
    Settings,
    TOTPSettings,
)
from vouch.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Settings and their sections.

    Each section is provided on its own so services depend only on the
    part of the configuration they read.
    """

    scope = Scope.APP

    @provide
    def provide_settings(self) -> Settings:
        """Read settings from the environment and ``.env``."""
        return Settings()

    @provide
    def provide_auth_settings(self, settings: Settings) -> AuthSettings:
        return settings.auth

    @provide
    def provide_totp_settings(self, settings: Settings) -> TOTPSettings:
        return settings.totp

    @provide
    def provide_cache_settings(self, settings: Settings) -> CacheSettings:
        return settings.cache

    @provide
    def provide_event_settings(self, settings: Settings) -> EventSettings:
        return settings.events

    @provide
    def provide_notification_settings(self, settings: Settings) -> NotificationSettings:
        return settings.notifications


class FixedSettingsProvider(ProviderBase):
    """Provides an already built Settings instance.

    Registered after ProdConfigProvider so its Settings wins; the section
    providers above still derive from it.
    """

    def __init__(self, settings: Settings) -> None:
        super().__init__()
        self._settings = settings

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        return self._settings
