"""Application layer DI providers."""

from dishka import Scope, provide

from vouch.application.usecase.auth import (
    FinalizeLoginUseCase,
    LoginUseCase,
    VerifySecondFactorUseCase,
)
from vouch.application.usecase.link import (
    CompleteLinkUseCase,
    InitiateLinkUseCase,
    UnlinkAccountUseCase,
)
from vouch.application.usecase.second_factor import SecondFactorChecker
from vouch.application.usecase.two_factor import (
    DisableTwoFactorUseCase,
    EnableTwoFactorUseCase,
    RegenerateBackupCodesUseCase,
    SetupTwoFactorUseCase,
)
from vouch.domain.event import EventBus
from vouch.domain.repository import IdentityRepository, UnitOfWork
from vouch.domain.service import (
    BackupCodeVault,
    CredentialVerifier,
    IdentityLinkBroker,
    JWTService,
    PasswordHasher,
    PendingAuthService,
    QRRenderer,
    RateLimiter,
    SecretCipher,
    TOTPEngine,
)
from vouch.util.clock import Clock
from vouch.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    @provide(scope=Scope.APP)
    def get_second_factor_checker(
        self,
        totp_engine: TOTPEngine,
        backup_code_vault: BackupCodeVault,
        cipher: SecretCipher,
    ) -> SecondFactorChecker:
        return SecondFactorChecker(totp_engine, backup_code_vault, cipher)

    # Auth use cases
    @provide(scope=Scope.REQUEST)
    def get_login_use_case(
        self,
        credential_verifier: CredentialVerifier,
        pending_auth_service: PendingAuthService,
        jwt_service: JWTService,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork,
    ) -> LoginUseCase:
        """Provide login use case."""
        return LoginUseCase(
            credential_verifier=credential_verifier,
            pending_auth_service=pending_auth_service,
            jwt_service=jwt_service,
            event_bus=event_bus,
            clock=clock,
            unit_of_work=unit_of_work,
        )

    @provide(scope=Scope.REQUEST)
    def get_verify_second_factor_use_case(
        self,
        identity_repository: IdentityRepository,
        pending_auth_service: PendingAuthService,
        second_factor_checker: SecondFactorChecker,
        rate_limiter: RateLimiter,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork,
    ) -> VerifySecondFactorUseCase:
        return VerifySecondFactorUseCase(
            identity_repository=identity_repository,
            pending_auth_service=pending_auth_service,
            second_factor_checker=second_factor_checker,
            rate_limiter=rate_limiter,
            event_bus=event_bus,
            clock=clock,
            unit_of_work=unit_of_work,
        )

    @provide(scope=Scope.REQUEST)
    def get_finalize_login_use_case(
        self,
        identity_repository: IdentityRepository,
        pending_auth_service: PendingAuthService,
        jwt_service: JWTService,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork,
    ) -> FinalizeLoginUseCase:
        return FinalizeLoginUseCase(
            identity_repository=identity_repository,
            pending_auth_service=pending_auth_service,
            jwt_service=jwt_service,
            event_bus=event_bus,
            clock=clock,
            unit_of_work=unit_of_work,
        )

    # Two-factor use cases
    @provide(scope=Scope.REQUEST)
    def get_setup_two_factor_use_case(
        self,
        identity_repository: IdentityRepository,
        totp_engine: TOTPEngine,
        backup_code_vault: BackupCodeVault,
        cipher: SecretCipher,
        qr_renderer: QRRenderer,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork,
    ) -> SetupTwoFactorUseCase:
        return SetupTwoFactorUseCase(
            identity_repository=identity_repository,
            totp_engine=totp_engine,
            backup_code_vault=backup_code_vault,
            cipher=cipher,
            qr_renderer=qr_renderer,
            event_bus=event_bus,
            clock=clock,
            unit_of_work=unit_of_work,
        )

    @provide(scope=Scope.REQUEST)
    def get_enable_two_factor_use_case(
        self,
        identity_repository: IdentityRepository,
        second_factor_checker: SecondFactorChecker,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork,
    ) -> EnableTwoFactorUseCase:
        return EnableTwoFactorUseCase(
            identity_repository=identity_repository,
            second_factor_checker=second_factor_checker,
            event_bus=event_bus,
            clock=clock,
            unit_of_work=unit_of_work,
        )

    @provide(scope=Scope.REQUEST)
    def get_disable_two_factor_use_case(
        self,
        identity_repository: IdentityRepository,
        password_hasher: PasswordHasher,
        second_factor_checker: SecondFactorChecker,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork,
    ) -> DisableTwoFactorUseCase:
        return DisableTwoFactorUseCase(
            identity_repository=identity_repository,
            password_hasher=password_hasher,
            second_factor_checker=second_factor_checker,
            event_bus=event_bus,
            clock=clock,
            unit_of_work=unit_of_work,
        )

    @provide(scope=Scope.REQUEST)
    def get_regenerate_backup_codes_use_case(
        self,
        identity_repository: IdentityRepository,
        backup_code_vault: BackupCodeVault,
        second_factor_checker: SecondFactorChecker,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork,
    ) -> RegenerateBackupCodesUseCase:
        return RegenerateBackupCodesUseCase(
            identity_repository=identity_repository,
            backup_code_vault=backup_code_vault,
            second_factor_checker=second_factor_checker,
            event_bus=event_bus,
            clock=clock,
            unit_of_work=unit_of_work,
        )

    # Link use cases
    @provide(scope=Scope.REQUEST)
    def get_initiate_link_use_case(
        self,
        link_broker: IdentityLinkBroker,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork,
    ) -> InitiateLinkUseCase:
        return InitiateLinkUseCase(
            link_broker=link_broker,
            event_bus=event_bus,
            clock=clock,
            unit_of_work=unit_of_work,
        )

    @provide(scope=Scope.REQUEST)
    def get_complete_link_use_case(
        self,
        link_broker: IdentityLinkBroker,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork,
    ) -> CompleteLinkUseCase:
        return CompleteLinkUseCase(
            link_broker=link_broker,
            event_bus=event_bus,
            clock=clock,
            unit_of_work=unit_of_work,
        )

    @provide(scope=Scope.REQUEST)
    def get_unlink_account_use_case(
        self,
        link_broker: IdentityLinkBroker,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork,
    ) -> UnlinkAccountUseCase:
        return UnlinkAccountUseCase(
            link_broker=link_broker,
            event_bus=event_bus,
            clock=clock,
            unit_of_work=unit_of_work,
        )
