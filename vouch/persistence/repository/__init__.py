"""PostgreSQL repository implementations."""

from vouch.persistence.repository.audit_record import PostgresAuditRecordRepository
from vouch.persistence.repository.identity import PostgresIdentityRepository
from vouch.persistence.repository.link_request import PostgresLinkRequestRepository
from vouch.persistence.repository.unit_of_work import SessionUnitOfWork

__all__ = [
    "PostgresIdentityRepository",
    "PostgresLinkRequestRepository",
    "PostgresAuditRecordRepository",
    "SessionUnitOfWork",
]
