"""Initiate account link use case."""

from pydantic import BaseModel

from vouch.domain.event import EventBus
from vouch.domain.model.outcome import Outcome
from vouch.domain.repository import UnitOfWork
from vouch.domain.service import IdentityLinkBroker, LinkInitiation
from vouch.domain.value import IdentityId, RequestContext
from vouch.util.clock import Clock

from ..base import BaseUseCase


class InitiateLinkRequest(BaseModel):
    identity_id: IdentityId
    password: str
    provider: str


class InitiateLinkUseCase(BaseUseCase):
    """Starts linking a provider; the returned token travels through OAuth."""

    command_name = "initiate_link"

    def __init__(
        self,
        link_broker: IdentityLinkBroker,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork | None = None,
    ) -> None:
        super().__init__(event_bus, clock, unit_of_work)
        self.link_broker = link_broker

    async def run(
        self, request: InitiateLinkRequest, context: RequestContext | None
    ) -> Outcome[LinkInitiation]:
        return await self.link_broker.initiate(
            request.identity_id, request.password, request.provider, context
        )
