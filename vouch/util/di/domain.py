"""Domain layer DI providers."""

from dishka import Scope, provide

from vouch.config import AuthSettings, Settings, TOTPSettings
from vouch.domain.event import EventBus
from vouch.domain.repository import (
    IdentityRepository,
    LinkRequestRepository,
    PendingAuthStore,
)
from vouch.domain.service import (
    BackupCodeVault,
    CredentialVerifier,
    IdentityLinkBroker,
    JWTService,
    PasswordHasher,
    PendingAuthService,
    RateLimiter,
    SecretCipher,
    TOTPEngine,
)
from vouch.util.clock import Clock
from vouch.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Services that touch repositories are REQUEST-scoped to align with the
    session lifecycle. Stateless services and those over shared stores are
    APP-scoped.
    """

    @provide(scope=Scope.APP)
    def get_totp_engine(self, totp_settings: TOTPSettings, clock: Clock) -> TOTPEngine:
        return TOTPEngine(settings=totp_settings, clock=clock)

    @provide(scope=Scope.APP)
    def get_backup_code_vault(
        self, cipher: SecretCipher, settings: Settings
    ) -> BackupCodeVault:
        return BackupCodeVault(cipher=cipher, count=settings.totp.backup_code_count)

    @provide(scope=Scope.APP)
    def get_jwt_service(self, auth_settings: AuthSettings, clock: Clock) -> JWTService:
        """Provide JWT token domain service."""
        return JWTService(auth_settings=auth_settings, clock=clock)

    @provide(scope=Scope.APP)
    def get_pending_auth_service(
        self, store: PendingAuthStore, clock: Clock, auth_settings: AuthSettings
    ) -> PendingAuthService:
        return PendingAuthService(
            store=store, clock=clock, ttl_seconds=auth_settings.pending_auth_ttl_seconds
        )

    @provide(scope=Scope.REQUEST)
    def get_credential_verifier(
        self,
        identity_repository: IdentityRepository,
        password_hasher: PasswordHasher,
        rate_limiter: RateLimiter,
        event_bus: EventBus,
        clock: Clock,
        auth_settings: AuthSettings,
    ) -> CredentialVerifier:
        """Provide credential verifier."""
        return CredentialVerifier(
            identity_repository=identity_repository,
            password_hasher=password_hasher,
            rate_limiter=rate_limiter,
            event_bus=event_bus,
            clock=clock,
            auth_settings=auth_settings,
        )

    @provide(scope=Scope.REQUEST)
    def get_identity_link_broker(
        self,
        identity_repository: IdentityRepository,
        link_request_repository: LinkRequestRepository,
        password_hasher: PasswordHasher,
        event_bus: EventBus,
        clock: Clock,
        auth_settings: AuthSettings,
    ) -> IdentityLinkBroker:
        """Provide identity link broker."""
        return IdentityLinkBroker(
            identity_repository=identity_repository,
            link_request_repository=link_request_repository,
            password_hasher=password_hasher,
            event_bus=event_bus,
            clock=clock,
            auth_settings=auth_settings,
        )
