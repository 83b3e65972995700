"""Domain services."""

from .backup_code_vault import BackupCodeCheck, BackupCodeVault
from .base import Service
from .cipher import SecretCipher
from .credential_verifier import CredentialVerifier, VerifiedIdentity
from .identity_link_broker import (
    IdentityLinkBroker,
    LinkCompletion,
    LinkInitiation,
    ProviderAccountData,
    ProviderProfile,
    UnlinkResult,
)
from .jwt_service import JWTService, SessionToken
from .notification import NotificationSink
from .password import PasswordHasher
from .pending_auth_service import PendingAuthService
from .rate_limiter import RateLimiter
from .totp_engine import QRRenderer, TOTPDiagnosis, TOTPEngine

__all__ = [
    "BackupCodeCheck",
    "BackupCodeVault",
    "CredentialVerifier",
    "IdentityLinkBroker",
    "JWTService",
    "LinkCompletion",
    "LinkInitiation",
    "NotificationSink",
    "PasswordHasher",
    "PendingAuthService",
    "ProviderAccountData",
    "ProviderProfile",
    "QRRenderer",
    "RateLimiter",
    "SecretCipher",
    "Service",
    "SessionToken",
    "TOTPDiagnosis",
    "TOTPEngine",
    "UnlinkResult",
    "VerifiedIdentity",
]
