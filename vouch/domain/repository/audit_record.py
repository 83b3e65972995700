"""Audit record repository interface."""

from abc import ABC, abstractmethod

from vouch.domain.model.audit import AuditEntry
from vouch.domain.value import IdentityId


class AuditRecordRepository(ABC):
    """Durable store for audit entries.

    Written by the audit observer outside the request's unit of work, so a
    rolled-back request still leaves its audit trail behind.
    """

    @abstractmethod
    async def append(self, entry: AuditEntry) -> None:
        """Append an audit entry.

        Args:
            entry: Entry to store
        """
        pass

    @abstractmethod
    async def find_by_identity(
        self, identity_id: IdentityId, limit: int = 100
    ) -> list[AuditEntry]:
        """Most recent entries for an identity, newest first.

        Args:
            identity_id: Identity the entries concern
            limit: Maximum number of entries

        Returns:
            List of entries (may be empty)
        """
        pass

    @abstractmethod
    async def count_by_action(self) -> dict[str, int]:
        """Number of stored entries per action."""
        pass
