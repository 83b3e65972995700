"""Verify second factor use case."""

import logfire
from pydantic import BaseModel

from vouch.domain.event import EventBus
from vouch.domain.model.event import (
    SuspiciousActivity,
    TwoFactorFailed,
    TwoFactorVerified,
)
from vouch.domain.model.outcome import Outcome
from vouch.domain.repository import IdentityRepository, UnitOfWork
from vouch.domain.service import PendingAuthService, RateLimiter
from vouch.domain.value import (
    FailureReason,
    IdentityId,
    RequestContext,
    SecondFactorMethod,
    ThreatLevel,
)
from vouch.util.clock import Clock

from ..base import BaseUseCase
from ..second_factor import SecondFactorChecker


class VerifySecondFactorRequest(BaseModel):
    identity_id: IdentityId
    code: str
    method: SecondFactorMethod = SecondFactorMethod.TOTP


class VerifySecondFactorResponse(BaseModel):
    identity_id: str
    method: SecondFactorMethod
    remaining_backup_codes: int | None = None


class VerifySecondFactorUseCase(BaseUseCase):
    """Checks the second factor of a pending login and marks it completed."""

    command_name = "verify_second_factor"

    def __init__(
        self,
        identity_repository: IdentityRepository,
        pending_auth_service: PendingAuthService,
        second_factor_checker: SecondFactorChecker,
        rate_limiter: RateLimiter,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork | None = None,
    ) -> None:
        """Initialize verify second factor use case.

        Args:
            identity_repository: Identity repository
            pending_auth_service: Pending login sessions
            second_factor_checker: TOTP and backup code checks
            rate_limiter: Attempt limiter, keyed per identity
            event_bus: Event bus
            clock: Time source
            unit_of_work: Rolled back when the run raises
        """
        super().__init__(event_bus, clock, unit_of_work)
        self.identity_repository = identity_repository
        self.pending_auth_service = pending_auth_service
        self.second_factor_checker = second_factor_checker
        self.rate_limiter = rate_limiter

    async def run(
        self, request: VerifySecondFactorRequest, context: RequestContext | None
    ) -> Outcome[VerifySecondFactorResponse]:
        """Verify the code for a pending login.

        Steps:
        1. Require a live pending session
        2. Refuse if too many codes were wrong
        3. Check the TOTP or backup code; a used backup code is removed
        4. Mark the pending session completed
        """
        identity_id = request.identity_id
        pending = await self.pending_auth_service.get(identity_id)
        if pending is None:
            return Outcome.failure(FailureReason.PENDING_SESSION_EXPIRED)

        limiter_key = f"2fa:{identity_id}"
        attempts = await self.rate_limiter.check(limiter_key)
        if attempts >= self.rate_limiter.limit:
            await self._publish(
                SuspiciousActivity(
                    activity="two_factor_brute_force",
                    severity=ThreatLevel.HIGH,
                    identity_id=identity_id,
                    details={"attempts": attempts},
                ),
                context,
                identity_id,
            )
            return Outcome.failure(FailureReason.RATE_LIMIT_EXCEEDED)

        identity = await self.identity_repository.find_by_id(identity_id)
        if identity is None:
            return Outcome.failure(FailureReason.IDENTITY_NOT_FOUND)
        if not identity.two_factor_enabled:
            return Outcome.failure(FailureReason.TWO_FACTOR_NOT_ENABLED)

        check = self.second_factor_checker.check(identity, request.code, request.method)
        if not check.valid:
            await self.rate_limiter.increment(limiter_key)
            reason = (
                FailureReason.BACKUP_CODE_INVALID
                if request.method == SecondFactorMethod.BACKUP_CODE
                else FailureReason.TOTP_INVALID
            )
            await self._publish(
                TwoFactorFailed(
                    identity_id=identity_id, reason=reason.value, method=request.method
                ),
                context,
                identity_id,
            )
            return Outcome.failure(reason)

        remaining = None
        if check.remaining_backup_codes is not None:
            remaining = len(check.remaining_backup_codes)
            await self.identity_repository.save(
                identity.model_copy(
                    update={
                        "backup_codes": check.remaining_backup_codes,
                        "updated_at": self.clock.now(),
                    }
                )
            )

        await self.rate_limiter.reset(limiter_key)
        await self.pending_auth_service.mark_completed(identity_id)
        await self._publish(
            TwoFactorVerified(
                identity_id=identity_id,
                method=request.method,
                remaining_backup_codes=remaining,
            ),
            context,
            identity_id,
        )
        logfire.info(
            "Second factor verified",
            identity_id=str(identity_id),
            method=request.method.value,
        )
        return Outcome.success(
            VerifySecondFactorResponse(
                identity_id=str(identity_id),
                method=request.method,
                remaining_backup_codes=remaining,
            )
        )
