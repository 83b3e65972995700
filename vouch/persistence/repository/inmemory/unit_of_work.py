"""In-memory unit of work for testing."""

from vouch.domain.repository.unit_of_work import UnitOfWork


class InMemoryUnitOfWork(UnitOfWork):
    """Counts rollbacks; in-memory repositories write through immediately."""

    def __init__(self) -> None:
        self.rollbacks = 0

    async def rollback(self) -> None:
        self.rollbacks += 1
