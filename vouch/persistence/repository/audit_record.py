"""Audit record repository implementation using PostgreSQL."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vouch.domain.model.audit import AuditEntry
from vouch.domain.repository.audit_record import AuditRecordRepository
from vouch.domain.value import IdentityId
from vouch.persistence.database import transaction
from vouch.persistence.mappers import audit_entry_to_dict, row_to_audit_entry
from vouch.persistence.tables import audit_records_table


class PostgresAuditRecordRepository(AuditRecordRepository):
    """PostgreSQL implementation of AuditRecordRepository.

    Uses its own short transaction per call instead of the request session,
    so entries survive a rolled-back request.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize repository.

        Args:
            session_factory: Factory for per-call sessions
        """
        self.session_factory = session_factory

    async def append(self, entry: AuditEntry) -> None:
        async with transaction(self.session_factory) as session:
            await session.execute(
                audit_records_table.insert().values(**audit_entry_to_dict(entry))
            )

    async def find_by_identity(
        self, identity_id: IdentityId, limit: int = 100
    ) -> list[AuditEntry]:
        stmt = (
            select(audit_records_table)
            .where(audit_records_table.c.identity_id == identity_id)
            .order_by(audit_records_table.c.timestamp.desc())
            .limit(limit)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [row_to_audit_entry(dict(row)) for row in result.mappings().all()]

    async def count_by_action(self) -> dict[str, int]:
        stmt = select(audit_records_table.c.action, func.count()).group_by(
            audit_records_table.c.action
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return {action: count for action, count in result.all()}
