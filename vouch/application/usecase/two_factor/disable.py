"""Disable two-factor use case."""

import logfire
from pydantic import BaseModel

from vouch.domain.event import EventBus
from vouch.domain.model.event import TwoFactorDisabled, TwoFactorFailed
from vouch.domain.model.outcome import Outcome
from vouch.domain.repository import IdentityRepository, UnitOfWork
from vouch.domain.service import PasswordHasher
from vouch.domain.value import (
    FailureReason,
    IdentityId,
    RequestContext,
    SecondFactorMethod,
)
from vouch.util.clock import Clock

from ..base import BaseUseCase
from ..second_factor import SecondFactorChecker


class DisableTwoFactorRequest(BaseModel):
    identity_id: IdentityId
    password: str
    code: str
    method: SecondFactorMethod = SecondFactorMethod.TOTP


class DisableTwoFactorUseCase(BaseUseCase):
    """Turns two-factor off after password and code reverification.

    The secret and all backup codes are removed.
    """

    command_name = "disable_two_factor"

    def __init__(
        self,
        identity_repository: IdentityRepository,
        password_hasher: PasswordHasher,
        second_factor_checker: SecondFactorChecker,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork | None = None,
    ) -> None:
        super().__init__(event_bus, clock, unit_of_work)
        self.identity_repository = identity_repository
        self.password_hasher = password_hasher
        self.second_factor_checker = second_factor_checker

    async def run(
        self, request: DisableTwoFactorRequest, context: RequestContext | None
    ) -> Outcome[None]:
        identity = await self.identity_repository.find_by_id(request.identity_id)
        if identity is None:
            return Outcome.failure(FailureReason.IDENTITY_NOT_FOUND)
        if not identity.two_factor_enabled:
            return Outcome.failure(FailureReason.TWO_FACTOR_NOT_ENABLED)

        if identity.password_hash is None:
            return Outcome.failure(FailureReason.PASSWORD_NOT_SET)
        if not self.password_hasher.verify(request.password, identity.password_hash):
            return Outcome.failure(FailureReason.INVALID_PASSWORD)

        check = self.second_factor_checker.check(identity, request.code, request.method)
        if not check.valid:
            reason = (
                FailureReason.BACKUP_CODE_INVALID
                if request.method == SecondFactorMethod.BACKUP_CODE
                else FailureReason.TOTP_INVALID
            )
            await self._publish(
                TwoFactorFailed(
                    identity_id=identity.id, reason=reason.value, method=request.method
                ),
                context,
                identity.id,
            )
            return Outcome.failure(reason)

        await self.identity_repository.save(
            identity.model_copy(
                update={
                    "two_factor_enabled": False,
                    "two_factor_secret": None,
                    "two_factor_enabled_at": None,
                    "backup_codes": [],
                    "updated_at": self.clock.now(),
                }
            )
        )
        await self._publish(TwoFactorDisabled(identity_id=identity.id), context, identity.id)
        logfire.info("Two-factor disabled", identity_id=str(identity.id))
        return Outcome.success()
