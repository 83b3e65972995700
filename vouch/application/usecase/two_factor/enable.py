"""Enable two-factor use case."""

from datetime import datetime

import logfire
from pydantic import BaseModel

from vouch.domain.event import EventBus
from vouch.domain.model.event import TwoFactorEnabled, TwoFactorFailed
from vouch.domain.model.outcome import Outcome
from vouch.domain.repository import IdentityRepository, UnitOfWork
from vouch.domain.value import (
    FailureReason,
    IdentityId,
    RequestContext,
    SecondFactorMethod,
)
from vouch.util.clock import Clock

from ..base import BaseUseCase
from ..second_factor import SecondFactorChecker


class EnableTwoFactorRequest(BaseModel):
    identity_id: IdentityId
    code: str


class EnableTwoFactorResponse(BaseModel):
    enabled_at: datetime
    backup_code_count: int


class EnableTwoFactorUseCase(BaseUseCase):
    """Turns two-factor on once the user proves the new secret works."""

    command_name = "enable_two_factor"

    def __init__(
        self,
        identity_repository: IdentityRepository,
        second_factor_checker: SecondFactorChecker,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork | None = None,
    ) -> None:
        super().__init__(event_bus, clock, unit_of_work)
        self.identity_repository = identity_repository
        self.second_factor_checker = second_factor_checker

    async def run(
        self, request: EnableTwoFactorRequest, context: RequestContext | None
    ) -> Outcome[EnableTwoFactorResponse]:
        identity = await self.identity_repository.find_by_id(request.identity_id)
        if identity is None:
            return Outcome.failure(FailureReason.IDENTITY_NOT_FOUND)
        if identity.two_factor_enabled:
            return Outcome.failure(FailureReason.TWO_FACTOR_ALREADY_ENABLED)
        if not identity.two_factor_secret:
            # Setup has not been run
            return Outcome.failure(FailureReason.TWO_FACTOR_NOT_ENABLED)

        check = self.second_factor_checker.check(
            identity, request.code, SecondFactorMethod.TOTP
        )
        if not check.valid:
            await self._publish(
                TwoFactorFailed(
                    identity_id=identity.id,
                    reason=FailureReason.TOTP_INVALID.value,
                    method=SecondFactorMethod.TOTP,
                ),
                context,
                identity.id,
            )
            return Outcome.failure(FailureReason.TOTP_INVALID)

        now = self.clock.now()
        await self.identity_repository.save(
            identity.model_copy(
                update={
                    "two_factor_enabled": True,
                    "two_factor_enabled_at": now,
                    "updated_at": now,
                }
            )
        )
        await self._publish(
            TwoFactorEnabled(
                identity_id=identity.id, backup_code_count=len(identity.backup_codes)
            ),
            context,
            identity.id,
        )
        logfire.info("Two-factor enabled", identity_id=str(identity.id))
        return Outcome.success(
            EnableTwoFactorResponse(
                enabled_at=now, backup_code_count=len(identity.backup_codes)
            )
        )
