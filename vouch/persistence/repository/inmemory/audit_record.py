"""In-memory audit record repository for testing."""

from collections import Counter

from vouch.domain.model.audit import AuditEntry
from vouch.domain.repository.audit_record import AuditRecordRepository
from vouch.domain.value import IdentityId


class InMemoryAuditRecordRepository(AuditRecordRepository):
    """In-memory implementation of AuditRecordRepository for testing."""

    def __init__(self) -> None:
        self._entries: list[AuditEntry] = []

    async def append(self, entry: AuditEntry) -> None:
        self._entries.append(entry)

    async def find_by_identity(
        self, identity_id: IdentityId, limit: int = 100
    ) -> list[AuditEntry]:
        matches = [e for e in self._entries if e.identity_id == identity_id]
        matches.sort(key=lambda e: e.timestamp, reverse=True)
        return matches[:limit]

    async def count_by_action(self) -> dict[str, int]:
        return dict(Counter(e.action for e in self._entries))
