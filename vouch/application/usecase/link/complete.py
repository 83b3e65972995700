"""Complete account link use case."""

from pydantic import BaseModel

from vouch.domain.event import EventBus
from vouch.domain.model.outcome import Outcome
from vouch.domain.repository import UnitOfWork
from vouch.domain.service import IdentityLinkBroker, LinkCompletion, ProviderAccountData
from vouch.domain.value import RequestContext
from vouch.util.clock import Clock

from ..base import BaseUseCase


class CompleteLinkRequest(BaseModel):
    """OAuth callback for a link flow.

    ``token`` is the link token issued at initiation, carried through the
    provider round trip.
    """

    token: str
    account: ProviderAccountData


class CompleteLinkUseCase(BaseUseCase):
    """Attaches the provider account named in the OAuth callback."""

    command_name = "complete_link"

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
        self, request: CompleteLinkRequest, context: RequestContext | None
    ) -> Outcome[LinkCompletion]:
        return await self.link_broker.complete(request.token, request.account, context)
