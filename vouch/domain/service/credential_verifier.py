"""Password credential verification."""

from datetime import timedelta

import logfire
from pydantic import ValidationError

from vouch.config import AuthSettings
from vouch.domain.event import EventBus
from vouch.domain.model.event import (
    AccountLocked,
    Event,
    LoginFailed,
    RateLimitExceeded,
    UserLoggedIn,
)
from vouch.domain.model.identity import Identity
from vouch.domain.model.outcome import Outcome
from vouch.domain.repository import IdentityRepository
from vouch.domain.value import (
    Email,
    FailureReason,
    IdentityId,
    RequestContext,
    Role,
)
from vouch.domain.value.common import ValueObject
from vouch.util.clock import Clock

from .base import Service
from .password import PasswordHasher
from .rate_limiter import RateLimiter


class VerifiedIdentity(ValueObject):
    """Summary of an identity whose password checked out."""

    identity_id: IdentityId
    email: str
    role: Role
    two_factor_enabled: bool


class CredentialVerifier(Service):
    """Checks an email/password pair behind a rate limit.

    Unknown emails and wrong passwords produce the same outcome and are
    counted the same way, so neither the result nor the limiter reveals
    whether an account exists.
    """

    def __init__(
        self,
        identity_repository: IdentityRepository,
        password_hasher: PasswordHasher,
        rate_limiter: RateLimiter,
        event_bus: EventBus,
        clock: Clock,
        auth_settings: AuthSettings,
    ) -> None:
        """Initialize credential verifier.

        Args:
            identity_repository: Identity repository
            password_hasher: Password hasher
            rate_limiter: Attempt limiter keyed by email
            event_bus: Event bus for login events
            clock: Time source
            auth_settings: Lockout settings
        """
        self.identity_repository = identity_repository
        self.password_hasher = password_hasher
        self.rate_limiter = rate_limiter
        self.event_bus = event_bus
        self.clock = clock
        self.auth_settings = auth_settings

    async def verify(
        self, email: str, password: str, context: RequestContext | None = None
    ) -> Outcome[VerifiedIdentity]:
        """Verify an email/password pair.

        Steps:
        1. Validate input shape
        2. Refuse without comparing if the rate limit is reached
        3. Look up the identity and refuse if it is locked
        4. Compare the password; count failures, reset on success

        Args:
            email: Submitted email
            password: Submitted password
            context: Request origin for event metadata

        Returns:
            Outcome carrying the verified identity summary
        """
        with logfire.span("credential_verifier.verify"):
            try:
                address = Email(email).root
            except ValidationError:
                address = None
            if address is None or not password:
                await self._publish_failure(
                    email or "", FailureReason.VALIDATION_ERROR, 0, context
                )
                return Outcome.failure(FailureReason.VALIDATION_ERROR)

            attempts = await self.rate_limiter.check(address)
            if attempts >= self.rate_limiter.limit:
                logfire.warn("Credential check rate limited", attempts=attempts)
                await self._publish(
                    RateLimitExceeded(
                        identifier=address,
                        action="login",
                        attempts=attempts,
                        limit=self.rate_limiter.limit,
                        window_seconds=self.rate_limiter.window_seconds,
                    ),
                    context,
                )
                await self._publish_failure(
                    address, FailureReason.RATE_LIMIT_EXCEEDED, attempts, context
                )
                return Outcome.failure(FailureReason.RATE_LIMIT_EXCEEDED)

            identity = await self.identity_repository.find_by_email(address)
            now = self.clock.now()

            if identity is not None and identity.is_locked(now):
                attempt_number = await self.rate_limiter.increment(address)
                logfire.warn("Login attempt on locked identity", identity_id=str(identity.id))
                await self._publish_failure(
                    address, FailureReason.ACCOUNT_LOCKED, attempt_number, context, identity
                )
                return Outcome.failure(FailureReason.ACCOUNT_LOCKED)

            if not self._password_matches(identity, password):
                attempt_number = await self.rate_limiter.increment(address)
                if identity is not None:
                    await self._record_mismatch(identity, context)
                await self._publish_failure(
                    address,
                    FailureReason.INVALID_CREDENTIALS,
                    attempt_number,
                    context,
                    identity,
                )
                return Outcome.failure(FailureReason.INVALID_CREDENTIALS)

            await self.rate_limiter.reset(address)
            identity = await self.identity_repository.save(
                identity.model_copy(
                    update={
                        "login_attempts": 0,
                        "locked_until": None,
                        "last_login_at": now,
                        "updated_at": now,
                    }
                )
            )

            await self._publish(
                UserLoggedIn(
                    identity_id=identity.id,
                    email=identity.email,
                    method="credentials",
                    two_factor_pending=identity.two_factor_enabled,
                ),
                context,
                identity.id,
            )
            logfire.info(
                "Credentials verified",
                identity_id=str(identity.id),
                two_factor_enabled=identity.two_factor_enabled,
            )
            return Outcome.success(
                VerifiedIdentity(
                    identity_id=identity.id,
                    email=identity.email,
                    role=identity.role,
                    two_factor_enabled=identity.two_factor_enabled,
                )
            )

    def _password_matches(self, identity: Identity | None, password: str) -> bool:
        if identity is None or identity.password_hash is None:
            return False
        return self.password_hasher.verify(password, identity.password_hash)

    async def _record_mismatch(
        self, identity: Identity, context: RequestContext | None
    ) -> None:
        """Count a mismatch against the identity and lock it at the threshold."""
        now = self.clock.now()
        attempts = identity.login_attempts + 1
        threshold = self.auth_settings.lockout_threshold

        if threshold and attempts >= threshold:
            locked_until = now + timedelta(minutes=self.auth_settings.lockout_minutes)
            await self.identity_repository.save(
                identity.model_copy(
                    update={
                        "login_attempts": 0,
                        "locked_until": locked_until,
                        "updated_at": now,
                    }
                )
            )
            logfire.warn(
                "Identity locked",
                identity_id=str(identity.id),
                failed_attempts=attempts,
                locked_until=locked_until.isoformat(),
            )
            await self._publish(
                AccountLocked(
                    identity_id=identity.id,
                    email=identity.email,
                    locked_until=locked_until,
                    failed_attempts=attempts,
                ),
                context,
                identity.id,
            )
            return

        await self.identity_repository.save(
            identity.model_copy(update={"login_attempts": attempts, "updated_at": now})
        )

    async def _publish_failure(
        self,
        email: str,
        reason: FailureReason,
        attempt_number: int,
        context: RequestContext | None,
        identity: Identity | None = None,
    ) -> None:
        logfire.info("Credential check failed", reason=reason.value)
        await self._publish(
            LoginFailed(email=email, reason=reason.value, attempt_number=attempt_number),
            context,
            identity.id if identity else None,
        )

    async def _publish(self, payload, context, identity_id=None) -> None:
        await self.event_bus.publish(
            Event.create(
                payload,
                user_id=identity_id,
                context=context,
                timestamp=self.clock.now(),
            )
        )
