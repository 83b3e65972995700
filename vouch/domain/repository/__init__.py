"""Repository interfaces for Vouch.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence and adapter layers.
"""

from vouch.domain.repository.audit_record import AuditRecordRepository
from vouch.domain.repository.identity import IdentityRepository
from vouch.domain.repository.link_request import LinkRequestRepository
from vouch.domain.repository.pending_auth import PendingAuthStore
from vouch.domain.repository.unit_of_work import UnitOfWork

__all__ = [
    "IdentityRepository",
    "LinkRequestRepository",
    "AuditRecordRepository",
    "PendingAuthStore",
    "UnitOfWork",
]
