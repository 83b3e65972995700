"""Login use case."""

from datetime import datetime

import logfire
from pydantic import BaseModel

from vouch.domain.event import EventBus
from vouch.domain.model.outcome import Outcome
from vouch.domain.repository import UnitOfWork
from vouch.domain.service import CredentialVerifier, JWTService, PendingAuthService
from vouch.domain.value import RequestContext
from vouch.util.clock import Clock

from ..base import BaseUseCase


class LoginRequest(BaseModel):
    """Email/password sign-in."""

    email: str
    password: str


class LoginResponse(BaseModel):
    """Login response.

    When ``two_factor_required`` is set there is no token yet: the client
    must verify a second factor and then finalize the login.
    """

    identity_id: str
    two_factor_required: bool
    token: str | None = None
    expires_at: datetime | None = None


class LoginUseCase(BaseUseCase):
    """Use case for password sign-in, first factor."""

    command_name = "login"

    def __init__(
        self,
        credential_verifier: CredentialVerifier,
        pending_auth_service: PendingAuthService,
        jwt_service: JWTService,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork | None = None,
    ) -> None:
        """Initialize login use case.

        Args:
            credential_verifier: Rate-limited password check
            pending_auth_service: Pending sessions for second-factor logins
            jwt_service: Session token issuer
            event_bus: Event bus
            clock: Time source
            unit_of_work: Rolled back when the run raises
        """
        super().__init__(event_bus, clock, unit_of_work)
        self.credential_verifier = credential_verifier
        self.pending_auth_service = pending_auth_service
        self.jwt_service = jwt_service

    async def run(
        self, request: LoginRequest, context: RequestContext | None
    ) -> Outcome[LoginResponse]:
        """Execute password login.

        Steps:
        1. Verify credentials
        2. If two-factor is enabled: open a pending session, no token
        3. Otherwise: issue a session token

        Args:
            request: Email and password
            context: Request origin

        Returns:
            Outcome carrying the login response
        """
        verified = await self.credential_verifier.verify(
            request.email, request.password, context
        )
        if not verified.ok:
            return Outcome.failure(verified.reason)

        identity = verified.value
        if identity.two_factor_enabled:
            await self.pending_auth_service.begin(identity.identity_id, identity.email)
            logfire.info("Second factor required", identity_id=str(identity.identity_id))
            return Outcome.success(
                LoginResponse(identity_id=str(identity.identity_id), two_factor_required=True)
            )

        session = self.jwt_service.issue(
            str(identity.identity_id), identity.email, identity.role.value
        )
        return Outcome.success(
            LoginResponse(
                identity_id=str(identity.identity_id),
                two_factor_required=False,
                token=session.token,
                expires_at=session.expires_at,
            )
        )
