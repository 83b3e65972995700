"""Unit of work over the request's SQLAlchemy session."""

import logfire
from sqlalchemy.ext.asyncio import AsyncSession

from vouch.domain.repository.unit_of_work import UnitOfWork


class SessionUnitOfWork(UnitOfWork):
    """Rolls back the session shared by the request's repositories."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def rollback(self) -> None:
        await self.session.rollback()
        logfire.warn("Unit of work rolled back")
