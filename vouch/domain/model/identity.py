"""Identity and external account entities."""

from datetime import datetime, timezone

from pydantic import Field

from vouch.domain.model.common import DomainModel
from vouch.domain.value import (
    AuthMethod,
    AuthProvider,
    ExternalAccountId,
    IdentityId,
    Role,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Identity(DomainModel):
    """A user account.

    Secrets are stored encrypted: ``two_factor_secret`` and every entry of
    ``backup_codes`` are ciphertexts produced by a SecretCipher.
    """

    id: IdentityId
    email: str
    name: str | None = None
    image: str | None = None
    password_hash: str | None = None
    role: Role = Role.USER
    primary_auth_method: AuthMethod = AuthMethod.PASSWORD
    linked_providers: frozenset[AuthProvider] = frozenset()

    two_factor_enabled: bool = False
    two_factor_secret: str | None = None
    two_factor_enabled_at: datetime | None = None
    backup_codes: list[str] = Field(default_factory=list)

    login_attempts: int = 0
    locked_until: datetime | None = None
    last_login_at: datetime | None = None

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def has_password(self) -> bool:
        return self.password_hash is not None

    def has_provider(self, provider: AuthProvider) -> bool:
        return provider in self.linked_providers

    def is_locked(self, now: datetime) -> bool:
        """Whether a lockout is in force at ``now``."""
        return self.locked_until is not None and now < self.locked_until


class ExternalAccount(DomainModel):
    """An account at an external identity provider attached to an identity.

    A (provider, provider_account_id) pair belongs to exactly one identity.
    """

    id: ExternalAccountId
    identity_id: IdentityId
    provider: AuthProvider
    provider_account_id: str

    access_token: str | None = None
    refresh_token: str | None = None
    expires_at: int | None = None  # Provider token expiry, epoch seconds
    token_type: str | None = None
    scope: str | None = None
    id_token: str | None = None

    created_at: datetime = Field(default_factory=_utcnow)


class IdentityAccounts(DomainModel):
    """An identity loaded together with its external accounts."""

    identity: Identity
    accounts: list[ExternalAccount] = Field(default_factory=list)

    def account_for(self, provider: AuthProvider) -> ExternalAccount | None:
        """Return the linked account for ``provider``, if any."""
        for account in self.accounts:
            if account.provider == provider:
                return account
        return None

    def other_providers(self, provider: AuthProvider) -> list[AuthProvider]:
        """Providers still linked once ``provider`` is removed."""
        linked = {account.provider for account in self.accounts}
        linked |= set(self.identity.linked_providers)
        linked.discard(provider)
        return sorted(linked, key=lambda p: p.value)
