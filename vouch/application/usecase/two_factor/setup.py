"""Set up two-factor use case."""

import base64

import logfire
from pydantic import BaseModel

from vouch.domain.event import EventBus
from vouch.domain.model.outcome import Outcome
from vouch.domain.repository import IdentityRepository, UnitOfWork
from vouch.domain.service import BackupCodeVault, QRRenderer, SecretCipher, TOTPEngine
from vouch.domain.value import FailureReason, IdentityId, RequestContext
from vouch.util.clock import Clock

from ..base import BaseUseCase


class SetupTwoFactorRequest(BaseModel):
    identity_id: IdentityId


class SetupTwoFactorResponse(BaseModel):
    """Everything the client shows during enrollment.

    The plaintext secret and backup codes are returned only here; storage
    holds ciphertexts.
    """

    secret: str
    provisioning_uri: str
    qr_code: str  # data: URL
    backup_codes: list[str]


class SetupTwoFactorUseCase(BaseUseCase):
    """Generates a TOTP secret and backup codes for an identity.

    Two-factor stays disabled until a code from the new secret is confirmed
    with EnableTwoFactorUseCase. Running setup again replaces the
    unconfirmed secret.
    """

    command_name = "setup_two_factor"

    def __init__(
        self,
        identity_repository: IdentityRepository,
        totp_engine: TOTPEngine,
        backup_code_vault: BackupCodeVault,
        cipher: SecretCipher,
        qr_renderer: QRRenderer,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork | None = None,
    ) -> None:
        """Initialize setup two-factor use case.

        Args:
            identity_repository: Identity repository
            totp_engine: Secret generation and provisioning URIs
            backup_code_vault: Backup code generation and encryption
            cipher: Cipher for the stored secret
            qr_renderer: Provisioning URI to image
            event_bus: Event bus
            clock: Time source
            unit_of_work: Rolled back when the run raises
        """
        super().__init__(event_bus, clock, unit_of_work)
        self.identity_repository = identity_repository
        self.totp_engine = totp_engine
        self.backup_code_vault = backup_code_vault
        self.cipher = cipher
        self.qr_renderer = qr_renderer

    async def run(
        self, request: SetupTwoFactorRequest, context: RequestContext | None
    ) -> Outcome[SetupTwoFactorResponse]:
        identity = await self.identity_repository.find_by_id(request.identity_id)
        if identity is None:
            return Outcome.failure(FailureReason.IDENTITY_NOT_FOUND)
        if identity.two_factor_enabled:
            return Outcome.failure(FailureReason.TWO_FACTOR_ALREADY_ENABLED)

        secret = self.totp_engine.generate_secret()
        uri = self.totp_engine.provisioning_uri(secret, identity.email)
        codes = self.backup_code_vault.generate()

        image = self.qr_renderer.render_to_image(uri)
        qr_code = (
            f"data:{self.qr_renderer.media_type};base64,"
            f"{base64.b64encode(image).decode('ascii')}"
        )

        await self.identity_repository.save(
            identity.model_copy(
                update={
                    "two_factor_secret": self.cipher.encrypt(secret),
                    "backup_codes": self.backup_code_vault.encrypt_for_storage(codes),
                    "updated_at": self.clock.now(),
                }
            )
        )
        logfire.info("Two-factor setup started", identity_id=str(identity.id))

        return Outcome.success(
            SetupTwoFactorResponse(
                secret=secret, provisioning_uri=uri, qr_code=qr_code, backup_codes=codes
            )
        )
