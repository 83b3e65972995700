"""In-memory repository implementations for testing."""

from .audit_record import InMemoryAuditRecordRepository
from .identity import InMemoryIdentityRepository
from .link_request import InMemoryLinkRequestRepository
from .unit_of_work import InMemoryUnitOfWork

__all__ = [
    "InMemoryAuditRecordRepository",
    "InMemoryIdentityRepository",
    "InMemoryLinkRequestRepository",
    "InMemoryUnitOfWork",
]
