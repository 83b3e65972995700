"""In-memory identity repository for testing."""

from typing import Optional

from vouch.domain.error import RepositoryError
from vouch.domain.model.identity import ExternalAccount, Identity, IdentityAccounts
from vouch.domain.repository.identity import IdentityRepository
from vouch.domain.value import AuthProvider, ExternalAccountId, IdentityId


class InMemoryIdentityRepository(IdentityRepository):
    """In-memory implementation of IdentityRepository for testing."""

    def __init__(self) -> None:
        self._identities: dict[IdentityId, Identity] = {}
        self._accounts: dict[ExternalAccountId, ExternalAccount] = {}

    async def find_by_id(self, identity_id: IdentityId) -> Optional[Identity]:
        return self._identities.get(identity_id)

    async def find_by_email(self, email: str) -> Optional[Identity]:
        address = email.strip().lower()
        for identity in self._identities.values():
            if identity.email == address:
                return identity
        return None

    async def find_with_accounts(
        self, identity_id: IdentityId
    ) -> Optional[IdentityAccounts]:
        identity = self._identities.get(identity_id)
        if identity is None:
            return None
        accounts = sorted(
            (a for a in self._accounts.values() if a.identity_id == identity_id),
            key=lambda a: a.created_at,
        )
        return IdentityAccounts(identity=identity, accounts=accounts)

    async def save(self, identity: Identity) -> Identity:
        self._identities[identity.id] = identity
        return identity

    async def find_account_by_provider(
        self, provider: AuthProvider, provider_account_id: str
    ) -> Optional[ExternalAccount]:
        for account in self._accounts.values():
            if (
                account.provider == provider
                and account.provider_account_id == provider_account_id
            ):
                return account
        return None

    async def link_account(
        self, identity: Identity, account: ExternalAccount
    ) -> ExternalAccount:
        """Create the account, enforcing the (provider, account id) uniqueness."""
        if await self.find_account_by_provider(
            account.provider, account.provider_account_id
        ):
            raise RepositoryError(
                f"Account {account.provider.value}:{account.provider_account_id} "
                "is already linked"
            )
        self._accounts[account.id] = account
        self._identities[identity.id] = identity
        return account

    async def unlink_account(
        self, identity: Identity, account_id: ExternalAccountId
    ) -> None:
        self._accounts.pop(account_id, None)
        self._identities[identity.id] = identity

    async def count(self) -> int:
        return len(self._identities)

    async def count_two_factor_enabled(self) -> int:
        return sum(1 for i in self._identities.values() if i.two_factor_enabled)
