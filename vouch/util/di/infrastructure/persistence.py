"""PostgreSQL component."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import logfire
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from vouch.config import Settings
from vouch.domain.repository import (
    AuditRecordRepository,
    IdentityRepository,
    LinkRequestRepository,
    UnitOfWork,
)
from vouch.persistence.database import create_engine, create_session_factory
from vouch.persistence.repository import (
    PostgresAuditRecordRepository,
    PostgresIdentityRepository,
    PostgresLinkRequestRepository,
    SessionUnitOfWork,
)
from vouch.util.di.base import ProviderBase
from vouch.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Identity, link request and audit stores."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Stores backed by PostgreSQL through asyncpg."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    async def get_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        engine = create_engine(settings)
        instrument_sqlalchemy(engine)
        yield engine
        await engine.dispose()
        logfire.debug("Database engine disposed")

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        return create_session_factory(engine)

    @provide(scope=Scope.REQUEST)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterator[AsyncSession]:
        """One unit of work per use case call.

        Identity and link request writes commit together when the request
        scope closes cleanly and roll back together otherwise.
        """
        async with session_factory() as session:
            try:
                yield session
            except Exception as e:
                await session.rollback()
                logfire.warn(
                    "Unit of work rolled back",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise
            await session.commit()

    @provide(scope=Scope.REQUEST)
    def get_unit_of_work(self, session: AsyncSession) -> UnitOfWork:
        return SessionUnitOfWork(session)

    @provide(scope=Scope.REQUEST)
    def get_identity_repository(self, session: AsyncSession) -> IdentityRepository:
        return PostgresIdentityRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_link_request_repository(
        self, session: AsyncSession
    ) -> LinkRequestRepository:
        return PostgresLinkRequestRepository(session)

    @provide(scope=Scope.APP)
    def get_audit_record_repository(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AuditRecordRepository:
        # APP scoped: observers outlive requests and open their own sessions
        return PostgresAuditRecordRepository(session_factory)
