"""Unlink account use case."""

from pydantic import BaseModel

from vouch.domain.event import EventBus
from vouch.domain.model.outcome import Outcome
from vouch.domain.repository import UnitOfWork
from vouch.domain.service import IdentityLinkBroker, UnlinkResult
from vouch.domain.value import IdentityId, RequestContext
from vouch.util.clock import Clock

from ..base import BaseUseCase


class UnlinkAccountRequest(BaseModel):
    identity_id: IdentityId
    password: str | None = None
    provider: str


class UnlinkAccountUseCase(BaseUseCase):
    command_name = "unlink_account"

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
        self, request: UnlinkAccountRequest, context: RequestContext | None
    ) -> Outcome[UnlinkResult]:
        return await self.link_broker.unlink(
            request.identity_id, request.password, request.provider, context
        )
