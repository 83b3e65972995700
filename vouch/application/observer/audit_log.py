"""Audit log observer."""

from collections import Counter, deque
from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

import logfire

from vouch.domain.model.audit import AuditEntry
from vouch.domain.model.event import Event, EventType
from vouch.domain.repository import AuditRecordRepository
from vouch.domain.value import AuditEntryId, AuditSeverity, IdentityId, ThreatLevel
from vouch.domain.value.common import ValueObject
from vouch.util.clock import Clock

# Event type -> (action, severity). Types not listed are audited as info
# under their own name.
AUDIT_RULES: dict[str, tuple[str, AuditSeverity]] = {
    EventType.USER_REGISTERED: ("user_registered", AuditSeverity.INFO),
    EventType.USER_LOGGED_IN: ("user_login", AuditSeverity.INFO),
    EventType.USER_PASSWORD_CHANGED: ("password_changed", AuditSeverity.WARNING),
    EventType.USER_PASSWORD_RESET_REQUESTED: ("password_reset_requested", AuditSeverity.INFO),
    EventType.USER_TWO_FACTOR_ENABLED: ("two_factor_enabled", AuditSeverity.INFO),
    EventType.USER_TWO_FACTOR_DISABLED: ("two_factor_disabled", AuditSeverity.WARNING),
    EventType.USER_TWO_FACTOR_VERIFIED: ("two_factor_verified", AuditSeverity.INFO),
    EventType.USER_BACKUP_CODES_REGENERATED: ("backup_codes_regenerated", AuditSeverity.WARNING),
    EventType.SECURITY_LOGIN_FAILED: ("login_failed", AuditSeverity.WARNING),
    EventType.SECURITY_ACCOUNT_LOCKED: ("account_locked", AuditSeverity.ERROR),
    EventType.SECURITY_RATE_LIMIT_EXCEEDED: ("rate_limit_exceeded", AuditSeverity.WARNING),
    EventType.SECURITY_TWO_FACTOR_FAILED: ("two_factor_failed", AuditSeverity.WARNING),
    EventType.ACCOUNT_LINK_INITIATED: ("account_link_initiated", AuditSeverity.INFO),
    EventType.ACCOUNT_LINKED: ("account_linked", AuditSeverity.INFO),
    EventType.ACCOUNT_LINK_FAILED: ("account_link_failed", AuditSeverity.WARNING),
    EventType.ACCOUNT_UNLINKED: ("account_unlinked", AuditSeverity.WARNING),
    EventType.SYSTEM_COMMAND_EXECUTED: ("command_executed", AuditSeverity.INFO),
    EventType.SYSTEM_COMMAND_FAILED: ("command_failed", AuditSeverity.ERROR),
}

THREAT_SEVERITY: dict[ThreatLevel, AuditSeverity] = {
    ThreatLevel.LOW: AuditSeverity.INFO,
    ThreatLevel.MEDIUM: AuditSeverity.WARNING,
    ThreatLevel.HIGH: AuditSeverity.ERROR,
    ThreatLevel.CRITICAL: AuditSeverity.CRITICAL,
}

# Payload fields never copied into audit details
REDACTED_FIELDS = {"type"}


class AuditFilter(ValueObject):
    identity_id: IdentityId | None = None
    severity: AuditSeverity | None = None
    start: datetime | None = None
    end: datetime | None = None
    limit: int | None = None


class AuditStats(ValueObject):
    total: int
    by_severity: dict[str, int]
    by_action: dict[str, int]
    recent_errors: int


class AuditLogObserver:
    """Turns every event into an audit entry.

    Keeps a capped in-memory history and, when given a repository, persists
    each entry as well. Error and critical entries are logged as they
    arrive.
    """

    name = "audit_log"

    def __init__(
        self,
        clock: Clock,
        repository: AuditRecordRepository | None = None,
        max_entries: int = 10_000,
    ) -> None:
        """Initialize audit log observer.

        Args:
            clock: Time source for the recent-errors window
            repository: Durable store for entries, if any
            max_entries: Size of the in-memory history
        """
        self.clock = clock
        self.repository = repository
        self._entries: deque[AuditEntry] = deque(maxlen=max_entries)

    async def handle(self, event: Event) -> None:
        entry = self.build_entry(event)
        # History only holds persisted entries; the bus retries the whole handle
        if self.repository is not None:
            await self.repository.append(entry)
        self._entries.append(entry)

        if entry.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            logfire.error(
                "Audit: {action}",
                action=entry.action,
                severity=entry.severity.value,
                identity_id=str(entry.identity_id) if entry.identity_id else None,
                details=entry.details,
            )
        else:
            logfire.debug("Audit: {action}", action=entry.action)

    def build_entry(self, event: Event) -> AuditEntry:
        action, severity = self.classify(event)
        details: dict[str, Any] = event.payload.model_dump(
            mode="json", exclude=REDACTED_FIELDS
        )
        return AuditEntry(
            id=AuditEntryId(uuid4()),
            event_id=event.event_id,
            event_type=event.type,
            action=action,
            severity=severity,
            timestamp=event.timestamp,
            identity_id=event.metadata.user_id,
            correlation_id=event.metadata.correlation_id,
            ip_address=event.metadata.ip_address,
            user_agent=event.metadata.user_agent,
            details=details,
        )

    @staticmethod
    def classify(event: Event) -> tuple[str, AuditSeverity]:
        """Action name and severity for an event."""
        payload = event.payload
        if event.type == EventType.SECURITY_SUSPICIOUS_ACTIVITY:
            return "suspicious_activity", THREAT_SEVERITY[payload.severity]
        if event.type == EventType.SECURITY_ALERT:
            return "security_alert", payload.severity
        if event.type == EventType.SYSTEM_ERROR_OCCURRED:
            return "system_error", payload.severity
        if event.type == EventType.ACCOUNT_LINK_FAILED and payload.operation == "unlink":
            return "account_unlink_failed", AuditSeverity.WARNING
        return AUDIT_RULES.get(event.type, (event.type, AuditSeverity.INFO))

    def entries(self, audit_filter: AuditFilter | None = None) -> list[AuditEntry]:
        """History matching the filter, newest first."""
        f = audit_filter or AuditFilter()
        matched = [
            entry
            for entry in reversed(self._entries)
            if (f.identity_id is None or entry.identity_id == f.identity_id)
            and (f.severity is None or entry.severity == f.severity)
            and (f.start is None or entry.timestamp >= f.start)
            and (f.end is None or entry.timestamp <= f.end)
        ]
        return matched[: f.limit] if f.limit is not None else matched

    def stats(self) -> AuditStats:
        since = self.clock.now() - timedelta(hours=24)
        return AuditStats(
            total=len(self._entries),
            by_severity=dict(Counter(e.severity.value for e in self._entries)),
            by_action=dict(Counter(e.action for e in self._entries)),
            recent_errors=sum(
                1
                for e in self._entries
                if e.timestamp >= since
                and e.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL)
            ),
        )

    def clear(self) -> None:
        self._entries.clear()
