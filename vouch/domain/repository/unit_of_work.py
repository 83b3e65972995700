"""Unit of work interface."""

from abc import ABC, abstractmethod


class UnitOfWork(ABC):
    """The request's pending repository writes, as one transaction.

    Committing happens when the request scope closes. Use cases roll back
    explicitly when a run fails, since they turn the failure into an
    outcome instead of letting it reach the scope.
    """

    @abstractmethod
    async def rollback(self) -> None:
        """Discard every write made in this unit of work so far."""
        pass
