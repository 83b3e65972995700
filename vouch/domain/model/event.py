"""Domain events.

Every event is a typed payload tagged by its ``type`` string plus shared
metadata. Payloads form a discriminated union, so an observer handles all
events through one ``handle(event)`` entry point and branches on
``event.type``.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union
from uuid import uuid4

from pydantic import Field

from vouch.domain.model.common import DomainModel
from vouch.domain.value import (
    AuditSeverity,
    EventId,
    IdentityId,
    RequestContext,
    SecondFactorMethod,
    ThreatLevel,
)
from vouch.domain.value.common import ValueObject


class EventType(str, Enum):
    """Known event types."""

    USER_REGISTERED = "user.registered"
    USER_LOGGED_IN = "user.logged_in"
    USER_PASSWORD_CHANGED = "user.password_changed"
    USER_PASSWORD_RESET_REQUESTED = "user.password_reset_requested"
    USER_TWO_FACTOR_ENABLED = "user.two_factor_enabled"
    USER_TWO_FACTOR_DISABLED = "user.two_factor_disabled"
    USER_TWO_FACTOR_VERIFIED = "user.two_factor_verified"
    USER_BACKUP_CODES_REGENERATED = "user.backup_codes_regenerated"

    SECURITY_LOGIN_FAILED = "security.login_failed"
    SECURITY_ACCOUNT_LOCKED = "security.account_locked"
    SECURITY_RATE_LIMIT_EXCEEDED = "security.rate_limit_exceeded"
    SECURITY_SUSPICIOUS_ACTIVITY = "security.suspicious_activity"
    SECURITY_TWO_FACTOR_FAILED = "security.two_factor_failed"
    SECURITY_ALERT = "security.alert"

    ACCOUNT_LINK_INITIATED = "account.link_initiated"
    ACCOUNT_LINKED = "account.linked"
    ACCOUNT_LINK_FAILED = "account.link_failed"
    ACCOUNT_UNLINKED = "account.unlinked"

    SYSTEM_COMMAND_EXECUTED = "system.command_executed"
    SYSTEM_COMMAND_FAILED = "system.command_failed"
    SYSTEM_ERROR_OCCURRED = "system.error_occurred"
    SYSTEM_PERFORMANCE_METRIC = "system.performance_metric"


WILDCARD = "*"


# ============================================================================
# USER EVENTS
# ============================================================================


class UserRegistered(ValueObject):
    type: Literal["user.registered"] = "user.registered"
    identity_id: IdentityId
    email: str
    name: str | None = None
    provider: str | None = None


class UserLoggedIn(ValueObject):
    type: Literal["user.logged_in"] = "user.logged_in"
    identity_id: IdentityId
    email: str
    method: str = "credentials"
    two_factor_pending: bool = False


class PasswordChanged(ValueObject):
    type: Literal["user.password_changed"] = "user.password_changed"
    identity_id: IdentityId
    email: str


class PasswordResetRequested(ValueObject):
    type: Literal["user.password_reset_requested"] = "user.password_reset_requested"
    email: str
    identity_id: IdentityId | None = None
    expires_at: datetime | None = None


class TwoFactorEnabled(ValueObject):
    type: Literal["user.two_factor_enabled"] = "user.two_factor_enabled"
    identity_id: IdentityId
    backup_code_count: int


class TwoFactorDisabled(ValueObject):
    type: Literal["user.two_factor_disabled"] = "user.two_factor_disabled"
    identity_id: IdentityId


class TwoFactorVerified(ValueObject):
    type: Literal["user.two_factor_verified"] = "user.two_factor_verified"
    identity_id: IdentityId
    method: SecondFactorMethod
    remaining_backup_codes: int | None = None


class BackupCodesRegenerated(ValueObject):
    type: Literal["user.backup_codes_regenerated"] = "user.backup_codes_regenerated"
    identity_id: IdentityId
    count: int


# ============================================================================
# SECURITY EVENTS
# ============================================================================


class LoginFailed(ValueObject):
    type: Literal["security.login_failed"] = "security.login_failed"
    email: str
    reason: str
    attempt_number: int = 0


class AccountLocked(ValueObject):
    type: Literal["security.account_locked"] = "security.account_locked"
    identity_id: IdentityId
    email: str
    locked_until: datetime
    failed_attempts: int


class RateLimitExceeded(ValueObject):
    type: Literal["security.rate_limit_exceeded"] = "security.rate_limit_exceeded"
    identifier: str
    action: str
    attempts: int
    limit: int
    window_seconds: int


class SuspiciousActivity(ValueObject):
    type: Literal["security.suspicious_activity"] = "security.suspicious_activity"
    activity: str
    severity: ThreatLevel
    identity_id: IdentityId | None = None
    details: dict[str, Any] = Field(default_factory=dict)


class TwoFactorFailed(ValueObject):
    type: Literal["security.two_factor_failed"] = "security.two_factor_failed"
    identity_id: IdentityId
    reason: str
    method: SecondFactorMethod | None = None


class SecurityAlert(ValueObject):
    type: Literal["security.alert"] = "security.alert"
    alert_type: str
    severity: AuditSeverity
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


# ============================================================================
# ACCOUNT LINKING EVENTS
# ============================================================================


class LinkInitiated(ValueObject):
    type: Literal["account.link_initiated"] = "account.link_initiated"
    identity_id: IdentityId
    provider: str
    expires_at: datetime


class AccountLinked(ValueObject):
    type: Literal["account.linked"] = "account.linked"
    identity_id: IdentityId
    provider: str
    provider_account_id: str
    external_account_id: str


class LinkFailed(ValueObject):
    type: Literal["account.link_failed"] = "account.link_failed"
    reason: str
    identity_id: IdentityId | None = None
    provider: str | None = None
    operation: Literal["initiate", "complete", "unlink"] = "complete"


class AccountUnlinked(ValueObject):
    type: Literal["account.unlinked"] = "account.unlinked"
    identity_id: IdentityId
    provider: str
    primary_auth_method: str


# ============================================================================
# SYSTEM EVENTS
# ============================================================================


class CommandExecuted(ValueObject):
    type: Literal["system.command_executed"] = "system.command_executed"
    command: str
    duration_ms: float
    success: bool = True
    reason: str | None = None


class CommandFailed(ValueObject):
    type: Literal["system.command_failed"] = "system.command_failed"
    command: str
    duration_ms: float
    error: str
    error_type: str


class ErrorOccurred(ValueObject):
    type: Literal["system.error_occurred"] = "system.error_occurred"
    error: str
    error_type: str
    severity: AuditSeverity = AuditSeverity.ERROR
    context: dict[str, Any] = Field(default_factory=dict)


class PerformanceMetric(ValueObject):
    type: Literal["system.performance_metric"] = "system.performance_metric"
    name: str
    value: float
    unit: str = "ms"
    tags: dict[str, str] = Field(default_factory=dict)


EventPayload = Annotated[
    Union[
        UserRegistered,
        UserLoggedIn,
        PasswordChanged,
        PasswordResetRequested,
        TwoFactorEnabled,
        TwoFactorDisabled,
        TwoFactorVerified,
        BackupCodesRegenerated,
        LoginFailed,
        AccountLocked,
        RateLimitExceeded,
        SuspiciousActivity,
        TwoFactorFailed,
        SecurityAlert,
        LinkInitiated,
        AccountLinked,
        LinkFailed,
        AccountUnlinked,
        CommandExecuted,
        CommandFailed,
        ErrorOccurred,
        PerformanceMetric,
    ],
    Field(discriminator="type"),
]


class EventMetadata(ValueObject):
    """Metadata shared by every event."""

    event_id: EventId = Field(default_factory=lambda: EventId(uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: IdentityId | None = None
    correlation_id: str = Field(default_factory=lambda: str(uuid4()))
    causation_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    version: int = 1


class Event(DomainModel):
    """Published event. Immutable once created."""

    payload: EventPayload
    metadata: EventMetadata = Field(default_factory=EventMetadata)

    @property
    def type(self) -> str:
        return self.payload.type

    @property
    def event_id(self) -> EventId:
        return self.metadata.event_id

    @property
    def timestamp(self) -> datetime:
        return self.metadata.timestamp

    @classmethod
    def create(
        cls,
        payload: EventPayload,
        *,
        user_id: IdentityId | None = None,
        context: RequestContext | None = None,
        timestamp: datetime | None = None,
        causation_id: str | None = None,
    ) -> "Event":
        """Build an event, copying request details into its metadata.

        Args:
            payload: Typed event payload
            user_id: Identity the event concerns
            context: Request origin (ip, user agent, correlation id)
            timestamp: Event time; defaults to now
            causation_id: Id of the event that caused this one
        """
        fields: dict[str, Any] = {"user_id": user_id, "causation_id": causation_id}
        if timestamp is not None:
            fields["timestamp"] = timestamp
        if context is not None:
            fields["ip_address"] = context.ip_address
            fields["user_agent"] = context.user_agent
            if context.correlation_id:
                fields["correlation_id"] = context.correlation_id
        return cls(payload=payload, metadata=EventMetadata(**fields))

    def caused(self, payload: EventPayload, timestamp: datetime | None = None) -> "Event":
        """Build a follow-up event in the same correlation group."""
        fields: dict[str, Any] = {
            "user_id": self.metadata.user_id,
            "correlation_id": self.metadata.correlation_id,
            "causation_id": str(self.metadata.event_id),
            "ip_address": self.metadata.ip_address,
            "user_agent": self.metadata.user_agent,
        }
        if timestamp is not None:
            fields["timestamp"] = timestamp
        return Event(payload=payload, metadata=EventMetadata(**fields))
