"""Engine and session helpers for the PostgreSQL store."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from vouch.config import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the asyncpg engine.

    Connections identify themselves as ``vouch`` in ``pg_stat_activity``
    and carry the configured statement timeout.
    """
    database = settings.database
    return create_async_engine(
        database.url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=database.pool_size,
        max_overflow=database.max_overflow,
        connect_args={
            "server_settings": {
                "application_name": "vouch",
                "statement_timeout": str(database.statement_timeout_ms),
            }
        },
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Identities are returned from repositories after commit; keep them loaded
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@asynccontextmanager
async def transaction(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Open a session in its own transaction, committed on clean exit.

    Audit entries are written this way so they are kept even when the
    request that produced them rolls back.
    """
    async with session_factory() as session, session.begin():
        yield session
