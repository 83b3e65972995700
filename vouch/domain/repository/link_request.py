"""Link request repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from vouch.domain.model.link_request import LinkRequest


class LinkRequestRepository(ABC):
    """Repository for issued link tokens."""

    @abstractmethod
    async def save(self, request: LinkRequest) -> LinkRequest:
        """Insert or update a link request.

        Args:
            request: Link request to persist

        Returns:
            The persisted link request
        """
        pass

    @abstractmethod
    async def find_by_token(self, token: str) -> Optional[LinkRequest]:
        """Find a link request by its token.

        Args:
            token: Opaque link token

        Returns:
            The link request if found, None otherwise
        """
        pass

    @abstractmethod
    async def delete_expired(self, before: datetime) -> int:
        """Delete requests that expired before ``before``.

        Returns:
            Number of deleted requests
        """
        pass
