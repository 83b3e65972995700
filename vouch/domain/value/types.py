"""Domain value objects for Vouch.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and business logic.
"""

import re
from enum import Enum

from pydantic import field_validator

from vouch.domain.value.common import RootValueObject, ValueObject

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class AuthProvider(str, Enum):
    """External identity providers that can be linked to an identity."""

    GOOGLE = "google"
    GITHUB = "github"


class AuthMethod(str, Enum):
    """Primary method an identity signs in with."""

    PASSWORD = "password"
    GOOGLE = "google"
    GITHUB = "github"


class Role(str, Enum):
    """Identity role."""

    USER = "user"
    ADMIN = "admin"


class SecondFactorMethod(str, Enum):
    """How a pending login was completed."""

    TOTP = "totp"
    BACKUP_CODE = "backup_code"


class FailureReason(str, Enum):
    """Why a verification or protocol step failed.

    Carried inside Outcome results instead of being raised.
    """

    VALIDATION_ERROR = "validation_error"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_LOCKED = "account_locked"
    TOTP_INVALID = "totp_invalid"
    BACKUP_CODE_INVALID = "backup_code_invalid"
    PENDING_SESSION_EXPIRED = "pending_session_expired"
    SECOND_FACTOR_REQUIRED = "second_factor_required"
    TWO_FACTOR_NOT_ENABLED = "two_factor_not_enabled"
    TWO_FACTOR_ALREADY_ENABLED = "two_factor_already_enabled"
    TOKEN_NOT_FOUND = "token_not_found"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_ALREADY_COMPLETED = "token_already_completed"
    PROVIDER_MISMATCH = "provider_mismatch"
    ACCOUNT_ALREADY_LINKED_ELSEWHERE = "account_already_linked_elsewhere"
    ALREADY_LINKED = "already_linked"
    PROVIDER_NOT_LINKED = "provider_not_linked"
    UNSUPPORTED_PROVIDER = "unsupported_provider"
    CANNOT_REMOVE_LAST_AUTH_METHOD = "cannot_remove_last_auth_method"
    INVALID_PASSWORD = "invalid_password"
    PASSWORD_NOT_SET = "password_not_set"
    IDENTITY_NOT_FOUND = "identity_not_found"
    INTERNAL_ERROR = "internal_error"


# Credential failures share one message so callers cannot tell
# "no such identity" from "wrong password".
FAILURE_MESSAGES: dict[FailureReason, str] = {
    FailureReason.VALIDATION_ERROR: "Invalid input",
    FailureReason.RATE_LIMIT_EXCEEDED: "Too many attempts. Please try again later",
    FailureReason.INVALID_CREDENTIALS: "Invalid email or password",
    FailureReason.ACCOUNT_LOCKED: "Invalid email or password",
    FailureReason.TOTP_INVALID: "Invalid verification code",
    FailureReason.BACKUP_CODE_INVALID: "Invalid verification code",
    FailureReason.PENDING_SESSION_EXPIRED: "Verification timed out. Please sign in again",
    FailureReason.SECOND_FACTOR_REQUIRED: "Verification code required",
    FailureReason.TWO_FACTOR_NOT_ENABLED: "Two-factor authentication is not enabled",
    FailureReason.TWO_FACTOR_ALREADY_ENABLED: "Two-factor authentication is already enabled",
    FailureReason.TOKEN_NOT_FOUND: "Invalid or expired link request",
    FailureReason.TOKEN_EXPIRED: "Invalid or expired link request",
    FailureReason.TOKEN_ALREADY_COMPLETED: "This link request has already been used",
    FailureReason.PROVIDER_MISMATCH: "Provider does not match the link request",
    FailureReason.ACCOUNT_ALREADY_LINKED_ELSEWHERE: "This account is linked to another user",
    FailureReason.ALREADY_LINKED: "This provider is already linked",
    FailureReason.PROVIDER_NOT_LINKED: "This provider is not linked",
    FailureReason.UNSUPPORTED_PROVIDER: "Unsupported provider",
    FailureReason.CANNOT_REMOVE_LAST_AUTH_METHOD: "Cannot remove your only sign-in method",
    FailureReason.INVALID_PASSWORD: "Invalid password",
    FailureReason.PASSWORD_NOT_SET: "Set a password first",
    FailureReason.IDENTITY_NOT_FOUND: "Account not found",
    FailureReason.INTERNAL_ERROR: "Something went wrong. Please try again",
}


class AuditSeverity(str, Enum):
    """Severity of an audit entry."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ThreatLevel(str, Enum):
    """Assessed level of suspicious activity."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class NotificationChannel(str, Enum):
    """Outbound notification channel."""

    EMAIL = "email"
    CHAT = "chat"


class NotificationPriority(str, Enum):
    """Notification priority."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class NotificationStatus(str, Enum):
    """Delivery state of a notification."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class Email(RootValueObject[str]):
    """Email address, lower-cased and trimmed."""

    @field_validator("root")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Validate the address has a plausible shape."""
        v = v.strip().lower()
        if len(v) > 255 or not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email address")
        return v


class RequestContext(ValueObject):
    """Where a request came from.

    Copied into the metadata of every event the request produces.
    """

    ip_address: str | None = None
    user_agent: str | None = None
    correlation_id: str | None = None
