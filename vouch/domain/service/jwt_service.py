"""Session token domain service."""

from datetime import datetime

import logfire

from vouch.config import AuthSettings
from vouch.domain.value.common import ValueObject
from vouch.util.clock import Clock
from vouch.util.jwt import TokenPayload, create_token, verify_token

from .base import Service


class SessionToken(ValueObject):
    """Signed session handed to the caller after a completed login."""

    token: str
    identity_id: str
    expires_at: datetime


class JWTService(Service):
    """Issues and verifies signed session tokens."""

    def __init__(self, auth_settings: AuthSettings, clock: Clock) -> None:
        """Initialize JWT service.

        Args:
            auth_settings: Authentication settings
            clock: Time source for issue times
        """
        self.auth_settings = auth_settings
        self.clock = clock

    def issue(self, identity_id: str, email: str, role: str) -> SessionToken:
        """Issue a session token for an authenticated identity.

        Args:
            identity_id: Identity ID
            email: Identity email
            role: Identity role

        Returns:
            Signed token and its expiry
        """
        with logfire.span("jwt_service.issue", identity_id=identity_id):
            token, expires_at = create_token(
                identity_id, email, role, self.auth_settings, self.clock.now()
            )
            logfire.info("Session token issued", identity_id=identity_id)
            return SessionToken(token=token, identity_id=identity_id, expires_at=expires_at)

    def verify(self, token: str) -> TokenPayload:
        """Verify a session token and extract its payload.

        Raises:
            TokenError: If token is invalid or expired
        """
        with logfire.span("jwt_service.verify"):
            try:
                payload = verify_token(token, self.auth_settings)
                logfire.info("Session token verified", identity_id=payload.identity_id)
                return payload
            except Exception as e:
                logfire.error("Session token verification failed", error=str(e))
                raise
