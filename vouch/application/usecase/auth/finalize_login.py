"""Finalize login use case."""

from datetime import datetime

from pydantic import BaseModel

from vouch.domain.event import EventBus
from vouch.domain.model.outcome import Outcome
from vouch.domain.repository import IdentityRepository, UnitOfWork
from vouch.domain.service import JWTService, PendingAuthService
from vouch.domain.value import FailureReason, IdentityId, RequestContext
from vouch.util.clock import Clock

from ..base import BaseUseCase


class FinalizeLoginRequest(BaseModel):
    identity_id: IdentityId


class FinalizeLoginResponse(BaseModel):
    identity_id: str
    token: str
    expires_at: datetime


class FinalizeLoginUseCase(BaseUseCase):
    """Issues the session token once the second factor has been verified."""

    command_name = "finalize_login"

    def __init__(
        self,
        identity_repository: IdentityRepository,
        pending_auth_service: PendingAuthService,
        jwt_service: JWTService,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork | None = None,
    ) -> None:
        super().__init__(event_bus, clock, unit_of_work)
        self.identity_repository = identity_repository
        self.pending_auth_service = pending_auth_service
        self.jwt_service = jwt_service

    async def run(
        self, request: FinalizeLoginRequest, context: RequestContext | None
    ) -> Outcome[FinalizeLoginResponse]:
        identity_id = request.identity_id

        pending = await self.pending_auth_service.get(identity_id)
        if pending is None:
            return Outcome.failure(FailureReason.PENDING_SESSION_EXPIRED)
        if not pending.completed:
            return Outcome.failure(FailureReason.SECOND_FACTOR_REQUIRED)

        identity = await self.identity_repository.find_by_id(identity_id)
        if identity is None:
            return Outcome.failure(FailureReason.IDENTITY_NOT_FOUND)

        # Completed sessions live until their TTL; repeat finalize calls succeed
        session = self.jwt_service.issue(str(identity.id), identity.email, identity.role.value)

        return Outcome.success(
            FinalizeLoginResponse(
                identity_id=session.identity_id,
                token=session.token,
                expires_at=session.expires_at,
            )
        )
