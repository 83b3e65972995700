"""Identity repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from vouch.domain.model.identity import ExternalAccount, Identity, IdentityAccounts
from vouch.domain.value import AuthProvider, ExternalAccountId, IdentityId


class IdentityRepository(ABC):
    """Repository for the Identity aggregate.

    External accounts belong to the aggregate, so linking and unlinking go
    through this repository as single atomic writes.
    """

    @abstractmethod
    async def find_by_id(self, identity_id: IdentityId) -> Optional[Identity]:
        """Find an identity by ID.

        Args:
            identity_id: The identity's unique identifier

        Returns:
            The identity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[Identity]:
        """Find an identity by email (case-insensitive).

        Args:
            email: Email address

        Returns:
            The identity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_with_accounts(
        self, identity_id: IdentityId
    ) -> Optional[IdentityAccounts]:
        """Load an identity together with its external accounts.

        Args:
            identity_id: The identity's unique identifier

        Returns:
            Identity and accounts if found, None otherwise
        """
        pass

    @abstractmethod
    async def save(self, identity: Identity) -> Identity:
        """Insert or update an identity.

        Args:
            identity: Identity to persist

        Returns:
            The persisted identity
        """
        pass

    @abstractmethod
    async def find_account_by_provider(
        self, provider: AuthProvider, provider_account_id: str
    ) -> Optional[ExternalAccount]:
        """Find the external account for a provider-side account id.

        Args:
            provider: External provider
            provider_account_id: The account's id at that provider

        Returns:
            The account if any identity has linked it, None otherwise
        """
        pass

    @abstractmethod
    async def link_account(
        self, identity: Identity, account: ExternalAccount
    ) -> ExternalAccount:
        """Create an external account and update its identity atomically.

        Args:
            identity: Identity with provider flag and profile already updated
            account: Account to create

        Returns:
            The created account
        """
        pass

    @abstractmethod
    async def unlink_account(
        self, identity: Identity, account_id: ExternalAccountId
    ) -> None:
        """Delete an external account and update its identity atomically.

        Args:
            identity: Identity with provider flag already cleared
            account_id: Account to delete
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of identities."""
        pass

    @abstractmethod
    async def count_two_factor_enabled(self) -> int:
        """Number of identities with two-factor authentication enabled."""
        pass
