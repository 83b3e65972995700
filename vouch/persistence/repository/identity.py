"""Identity repository implementation using PostgreSQL."""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vouch.domain.error import RepositoryError
from vouch.domain.model.identity import ExternalAccount, Identity, IdentityAccounts
from vouch.domain.repository.identity import IdentityRepository
from vouch.domain.value import AuthProvider, ExternalAccountId, IdentityId
from vouch.persistence.mappers import (
    external_account_to_dict,
    identity_to_dict,
    row_to_external_account,
    row_to_identity,
)
from vouch.persistence.tables import external_accounts_table, identities_table


class PostgresIdentityRepository(IdentityRepository):
    """PostgreSQL implementation of IdentityRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session (request-scoped unit of work)
        """
        self.session = session

    async def find_by_id(self, identity_id: IdentityId) -> Optional[Identity]:
        stmt = select(identities_table).where(identities_table.c.id == identity_id)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_identity(dict(row)) if row else None

    async def find_by_email(self, email: str) -> Optional[Identity]:
        stmt = select(identities_table).where(
            identities_table.c.email == email.strip().lower()
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_identity(dict(row)) if row else None

    async def find_with_accounts(
        self, identity_id: IdentityId
    ) -> Optional[IdentityAccounts]:
        identity = await self.find_by_id(identity_id)
        if identity is None:
            return None

        stmt = (
            select(external_accounts_table)
            .where(external_accounts_table.c.identity_id == identity_id)
            .order_by(external_accounts_table.c.created_at)
        )
        result = await self.session.execute(stmt)
        accounts = [row_to_external_account(dict(row)) for row in result.mappings().all()]
        return IdentityAccounts(identity=identity, accounts=accounts)

    async def save(self, identity: Identity) -> Identity:
        """Insert or update an identity.

        Args:
            identity: Identity to persist

        Returns:
            The persisted identity
        """
        identity_dict = identity_to_dict(identity)

        existing = await self.session.execute(
            select(identities_table.c.id).where(identities_table.c.id == identity.id)
        )
        if existing.first():
            stmt = (
                identities_table.update()
                .where(identities_table.c.id == identity.id)
                .values(**identity_dict)
            )
        else:
            stmt = identities_table.insert().values(**identity_dict)
        await self.session.execute(stmt)

        await self.session.flush()
        return identity

    async def find_account_by_provider(
        self, provider: AuthProvider, provider_account_id: str
    ) -> Optional[ExternalAccount]:
        stmt = select(external_accounts_table).where(
            external_accounts_table.c.provider == provider.value,
            external_accounts_table.c.provider_account_id == provider_account_id,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_external_account(dict(row)) if row else None

    async def link_account(
        self, identity: Identity, account: ExternalAccount
    ) -> ExternalAccount:
        """Create the account and update the identity in one savepoint.

        A concurrent link of the same provider account trips the unique
        constraint and leaves both rows untouched.

        Raises:
            RepositoryError: If the account is already linked
        """
        try:
            async with self.session.begin_nested():
                await self.session.execute(
                    external_accounts_table.insert().values(
                        **external_account_to_dict(account)
                    )
                )
                await self.session.execute(
                    identities_table.update()
                    .where(identities_table.c.id == identity.id)
                    .values(**identity_to_dict(identity))
                )
        except IntegrityError as e:
            raise RepositoryError(
                f"Account {account.provider.value}:{account.provider_account_id} "
                "is already linked"
            ) from e
        return account

    async def unlink_account(
        self, identity: Identity, account_id: ExternalAccountId
    ) -> None:
        async with self.session.begin_nested():
            await self.session.execute(
                external_accounts_table.delete().where(
                    external_accounts_table.c.id == account_id,
                    external_accounts_table.c.identity_id == identity.id,
                )
            )
            await self.session.execute(
                identities_table.update()
                .where(identities_table.c.id == identity.id)
                .values(**identity_to_dict(identity))
            )

    async def count(self) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(identities_table)
        )
        return result.scalar_one()

    async def count_two_factor_enabled(self) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(identities_table)
            .where(identities_table.c.two_factor_enabled.is_(True))
        )
        return result.scalar_one()
