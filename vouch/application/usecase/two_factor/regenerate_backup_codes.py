"""Regenerate backup codes use case."""

import logfire
from pydantic import BaseModel

from vouch.domain.event import EventBus
from vouch.domain.model.event import BackupCodesRegenerated, TwoFactorFailed
from vouch.domain.model.outcome import Outcome
from vouch.domain.repository import IdentityRepository, UnitOfWork
from vouch.domain.service import BackupCodeVault
from vouch.domain.value import (
    FailureReason,
    IdentityId,
    RequestContext,
    SecondFactorMethod,
)
from vouch.util.clock import Clock

from ..base import BaseUseCase
from ..second_factor import SecondFactorChecker


class RegenerateBackupCodesRequest(BaseModel):
    identity_id: IdentityId
    code: str  # Current TOTP code


class RegenerateBackupCodesResponse(BaseModel):
    backup_codes: list[str]


class RegenerateBackupCodesUseCase(BaseUseCase):
    """Replaces every backup code with a fresh set."""

    command_name = "regenerate_backup_codes"

    def __init__(
        self,
        identity_repository: IdentityRepository,
        backup_code_vault: BackupCodeVault,
        second_factor_checker: SecondFactorChecker,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork | None = None,
    ) -> None:
        super().__init__(event_bus, clock, unit_of_work)
        self.identity_repository = identity_repository
        self.backup_code_vault = backup_code_vault
        self.second_factor_checker = second_factor_checker

    async def run(
        self, request: RegenerateBackupCodesRequest, context: RequestContext | None
    ) -> Outcome[RegenerateBackupCodesResponse]:
        identity = await self.identity_repository.find_by_id(request.identity_id)
        if identity is None:
            return Outcome.failure(FailureReason.IDENTITY_NOT_FOUND)
        if not identity.two_factor_enabled:
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

        codes = self.backup_code_vault.generate()
        await self.identity_repository.save(
            identity.model_copy(
                update={
                    "backup_codes": self.backup_code_vault.encrypt_for_storage(codes),
                    "updated_at": self.clock.now(),
                }
            )
        )
        await self._publish(
            BackupCodesRegenerated(identity_id=identity.id, count=len(codes)),
            context,
            identity.id,
        )
        logfire.info("Backup codes regenerated", identity_id=str(identity.id))
        return Outcome.success(RegenerateBackupCodesResponse(backup_codes=codes))
