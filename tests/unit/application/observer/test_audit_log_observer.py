"""Unit tests for AuditLogObserver."""

from datetime import timedelta
from uuid import uuid4

import pytest

from vouch.application.observer import AuditFilter, AuditLogObserver
from vouch.config import EventSettings
from vouch.domain.event import EventBus, InMemoryEventStore
from vouch.domain.model.event import (
    AccountLocked,
    ErrorOccurred,
    Event,
    LinkFailed,
    LoginFailed,
    SuspiciousActivity,
    UserLoggedIn,
)
from vouch.domain.model.audit import AuditEntry
from vouch.domain.repository import AuditRecordRepository
from vouch.domain.value import AuditSeverity, IdentityId, RequestContext, ThreatLevel
from vouch.persistence.repository.inmemory import InMemoryAuditRecordRepository
from tests.di import FrozenClock
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked
unit_env = create_env_fixture()


class FlakyAuditRecordRepository(InMemoryAuditRecordRepository):
    """Fails the first ``failures`` appends, then stores normally."""

    def __init__(self, failures: int) -> None:
        super().__init__()
        self.failures = failures
        self.calls = 0

    async def append(self, entry: AuditEntry) -> None:
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError("audit store unavailable")
        await super().append(entry)


class TestAuditEntries:
    """Tests for turning events into audit entries."""

    @pytest.mark.asyncio
    async def test_published_event_is_audited_and_persisted(self, unit_env):
        """Every published event should produce one stored entry."""
        # Arrange
        bus = await unit_env.get(EventBus)
        audit = await unit_env.get(AuditLogObserver)
        repository = await unit_env.get(AuditRecordRepository)
        identity_id = IdentityId(uuid4())
        context = RequestContext(ip_address="10.0.0.7", user_agent="pytest", correlation_id="c-1")

        # Act
        await bus.publish(
            Event.create(
                UserLoggedIn(identity_id=identity_id, email="a@example.com"),
                user_id=identity_id,
                context=context,
            )
        )

        # Assert
        entries = audit.entries()
        assert len(entries) == 1
        entry = entries[0]
        assert entry.action == "user_login"
        assert entry.severity == AuditSeverity.INFO
        assert entry.identity_id == identity_id
        assert entry.ip_address == "10.0.0.7"
        assert entry.correlation_id == "c-1"
        assert entry.details["email"] == "a@example.com"
        assert "type" not in entry.details

        stored = await repository.find_by_identity(identity_id)
        assert [e.id for e in stored] == [entry.id]

    @pytest.mark.asyncio
    async def test_retried_delivery_records_one_entry(self):
        """A failed append retried by the bus should leave a single entry."""
        # Arrange
        repository = FlakyAuditRecordRepository(failures=1)
        audit = AuditLogObserver(clock=FrozenClock(), repository=repository)
        bus = EventBus(
            store=InMemoryEventStore(),
            settings=EventSettings(
                async_dispatch=False, max_retries=3, retry_delay_seconds=0
            ),
        )
        bus.subscribe_observer(audit)
        identity_id = IdentityId(uuid4())

        # Act
        await bus.publish(
            Event.create(
                UserLoggedIn(identity_id=identity_id, email="a@example.com"),
                user_id=identity_id,
            )
        )

        # Assert
        assert repository.calls == 2
        assert len(audit.entries()) == 1
        stored = await repository.find_by_identity(identity_id)
        assert [e.id for e in stored] == [audit.entries()[0].id]
        assert bus.failed_deliveries == 0

    def test_classification_rules(self):
        """Security events should be classified with their severities."""
        # Arrange
        identity_id = IdentityId(uuid4())
        failed = Event.create(LoginFailed(email="a@example.com", reason="x"))
        locked = Event.create(
            AccountLocked(
                identity_id=identity_id,
                email="a@example.com",
                locked_until=failed.timestamp,
                failed_attempts=20,
            )
        )

        # Act & Assert
        assert AuditLogObserver.classify(failed) == ("login_failed", AuditSeverity.WARNING)
        assert AuditLogObserver.classify(locked) == ("account_locked", AuditSeverity.ERROR)

    def test_unlink_failure_has_its_own_action(self):
        """Failed unlinks should be audited apart from failed links."""
        # Arrange
        link = Event.create(LinkFailed(reason="invalid_password", operation="initiate"))
        unlink = Event.create(LinkFailed(reason="invalid_password", operation="unlink"))

        # Act & Assert
        assert AuditLogObserver.classify(link) == ("account_link_failed", AuditSeverity.WARNING)
        assert AuditLogObserver.classify(unlink) == (
            "account_unlink_failed",
            AuditSeverity.WARNING,
        )

    @pytest.mark.parametrize(
        "threat,severity",
        [
            (ThreatLevel.LOW, AuditSeverity.INFO),
            (ThreatLevel.MEDIUM, AuditSeverity.WARNING),
            (ThreatLevel.HIGH, AuditSeverity.ERROR),
            (ThreatLevel.CRITICAL, AuditSeverity.CRITICAL),
        ],
    )
    def test_threat_level_maps_to_severity(self, threat, severity):
        """Suspicious activity severity should follow the threat level."""
        # Arrange
        event = Event.create(SuspiciousActivity(activity="scan", severity=threat))

        # Act
        action, classified = AuditLogObserver.classify(event)

        # Assert
        assert action == "suspicious_activity"
        assert classified == severity


class TestAuditQueries:
    """Tests for history queries and statistics."""

    @pytest.mark.asyncio
    async def test_entries_newest_first_with_filters(self, unit_env):
        """Filters should combine and results come newest first."""
        # Arrange
        audit = await unit_env.get(AuditLogObserver)
        clock = await unit_env.get(FrozenClock)
        for minute in range(3):
            await audit.handle(
                Event.create(
                    LoginFailed(email=f"{minute}@example.com", reason="x"),
                    timestamp=clock.now() + timedelta(minutes=minute),
                )
            )
        await audit.handle(Event.create(ErrorOccurred(error="db down", error_type="OSError")))

        # Act
        warnings = audit.entries(AuditFilter(severity=AuditSeverity.WARNING, limit=2))

        # Assert
        assert [e.details["email"] for e in warnings] == ["2@example.com", "1@example.com"]

    @pytest.mark.asyncio
    async def test_stats_counts_recent_errors(self, unit_env):
        """Only error and critical entries from the last day count as recent."""
        # Arrange
        audit = await unit_env.get(AuditLogObserver)
        clock = await unit_env.get(FrozenClock)
        await audit.handle(
            Event.create(
                ErrorOccurred(error="old", error_type="OSError"),
                timestamp=clock.now() - timedelta(days=2),
            )
        )
        await audit.handle(
            Event.create(
                ErrorOccurred(
                    error="new", error_type="OSError", severity=AuditSeverity.CRITICAL
                ),
                timestamp=clock.now(),
            )
        )
        await audit.handle(Event.create(LoginFailed(email="a@example.com", reason="x")))

        # Act
        stats = audit.stats()

        # Assert
        assert stats.total == 3
        assert stats.recent_errors == 1
        assert stats.by_action == {"system_error": 2, "login_failed": 1}
        assert stats.by_severity == {"error": 1, "critical": 1, "warning": 1}

    @pytest.mark.asyncio
    async def test_history_is_capped(self, unit_env):
        """Only the newest ``max_entries`` entries should be kept in memory."""
        # Arrange
        clock = await unit_env.get(FrozenClock)
        audit = AuditLogObserver(clock=clock, max_entries=2)

        # Act
        for n in range(3):
            await audit.handle(Event.create(LoginFailed(email=f"{n}@example.com", reason="x")))

        # Assert
        assert [e.details["email"] for e in audit.entries()] == [
            "2@example.com",
            "1@example.com",
        ]
