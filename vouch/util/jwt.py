"""Session tokens issued once login is finalized."""

from datetime import datetime, timedelta

import jwt
from pydantic import BaseModel

from vouch.config import AuthSettings
from vouch.util.error import TokenError

ISSUER = "vouch"


class TokenPayload(BaseModel):
    """Claims carried by a session token."""

    identity_id: str
    email: str
    role: str
    iat: datetime
    exp: datetime


def create_token(
    identity_id: str,
    email: str,
    role: str,
    settings: AuthSettings,
    issued_at: datetime,
) -> tuple[str, datetime]:
    """Sign a session token valid for ``jwt_expiry_days``.

    Args:
        identity_id: Identity the session belongs to
        email: Identity email, for display by clients
        role: Identity role
        settings: Secret, algorithm and lifetime
        issued_at: Timezone-aware issue time

    Returns:
        The encoded token and its expiry
    """
    expires_at = issued_at + timedelta(days=settings.jwt_expiry_days)
    claims = {
        "iss": ISSUER,
        "identity_id": identity_id,
        "email": email,
        "role": role,
        "iat": issued_at,
        "exp": expires_at,
    }
    return (
        jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm),
        expires_at,
    )


def verify_token(token: str, settings: AuthSettings) -> TokenPayload:
    """Check signature, issuer and expiry, then return the claims.

    Raises:
        TokenError: If the token is expired, forged or malformed
    """
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=ISSUER,
            options={"require": ["exp", "iat", "iss"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise TokenError("Invalid token") from e
    return TokenPayload(**claims)
