"""Link request repository implementation using PostgreSQL."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vouch.domain.model.link_request import LinkRequest
from vouch.domain.repository.link_request import LinkRequestRepository
from vouch.persistence.mappers import link_request_to_dict, row_to_link_request
from vouch.persistence.tables import link_requests_table


class PostgresLinkRequestRepository(LinkRequestRepository):
    """PostgreSQL implementation of LinkRequestRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def save(self, request: LinkRequest) -> LinkRequest:
        """Insert or update a link request.

        Args:
            request: Link request to persist

        Returns:
            The persisted link request
        """
        request_dict = link_request_to_dict(request)

        existing = await self.session.execute(
            select(link_requests_table.c.id).where(link_requests_table.c.id == request.id)
        )
        if existing.first():
            stmt = (
                link_requests_table.update()
                .where(link_requests_table.c.id == request.id)
                .values(**request_dict)
            )
        else:
            stmt = link_requests_table.insert().values(**request_dict)
        await self.session.execute(stmt)

        await self.session.flush()
        return request

    async def find_by_token(self, token: str) -> Optional[LinkRequest]:
        stmt = select(link_requests_table).where(link_requests_table.c.token == token)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_link_request(dict(row)) if row else None

    async def delete_expired(self, before: datetime) -> int:
        result = await self.session.execute(
            link_requests_table.delete().where(link_requests_table.c.expires_at < before)
        )
        await self.session.flush()
        return result.rowcount
