"""In-memory link request repository for testing."""

from datetime import datetime
from typing import Optional

from vouch.domain.model.link_request import LinkRequest
from vouch.domain.repository.link_request import LinkRequestRepository
from vouch.domain.value import LinkRequestId


class InMemoryLinkRequestRepository(LinkRequestRepository):
    """In-memory implementation of LinkRequestRepository for testing."""

    def __init__(self) -> None:
        self._requests: dict[LinkRequestId, LinkRequest] = {}

    async def save(self, request: LinkRequest) -> LinkRequest:
        self._requests[request.id] = request
        return request

    async def find_by_token(self, token: str) -> Optional[LinkRequest]:
        for request in self._requests.values():
            if request.token == token:
                return request
        return None

    async def delete_expired(self, before: datetime) -> int:
        expired = [r.id for r in self._requests.values() if r.expires_at < before]
        for request_id in expired:
            del self._requests[request_id]
        return len(expired)
