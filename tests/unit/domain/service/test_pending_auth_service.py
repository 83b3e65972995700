"""Unit tests for PendingAuthService."""

from uuid import uuid4

import pytest

from vouch.domain.service import PendingAuthService
from vouch.domain.value import IdentityId
from tests.di import FrozenClock
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked
unit_env = create_env_fixture()


class TestPendingAuthService:
    """Tests for the pending -> completed lifecycle."""

    @pytest.mark.asyncio
    async def test_begin_opens_pending_session(self, unit_env):
        """A new session should be pending and readable."""
        # Arrange
        service = await unit_env.get(PendingAuthService)
        identity_id = IdentityId(uuid4())

        # Act
        session = await service.begin(identity_id, "a@example.com")

        # Assert
        assert session.completed is False
        fetched = await service.get(identity_id)
        assert fetched == session

    @pytest.mark.asyncio
    async def test_get_returns_none_for_absent_session(self, unit_env):
        """No session should be found for an identity that never logged in."""
        # Arrange
        service = await unit_env.get(PendingAuthService)

        # Act
        session = await service.get(IdentityId(uuid4()))

        # Assert
        assert session is None

    @pytest.mark.asyncio
    async def test_expired_session_is_deleted_on_read(self, unit_env):
        """A session older than the TTL should read as absent and be removed."""
        # Arrange
        service = await unit_env.get(PendingAuthService)
        clock = await unit_env.get(FrozenClock)
        identity_id = IdentityId(uuid4())
        await service.begin(identity_id, "a@example.com")

        # Act
        clock.advance(seconds=service.ttl_seconds + 1)
        session = await service.get(identity_id)

        # Assert
        assert session is None
        assert await service.store.get(identity_id) is None

    @pytest.mark.asyncio
    async def test_session_at_exact_ttl_is_still_live(self, unit_env):
        """Expiry should only apply strictly after the TTL."""
        # Arrange
        service = await unit_env.get(PendingAuthService)
        clock = await unit_env.get(FrozenClock)
        identity_id = IdentityId(uuid4())
        await service.begin(identity_id, "a@example.com")

        # Act
        clock.advance(seconds=service.ttl_seconds)

        # Assert
        assert await service.get(identity_id) is not None

    @pytest.mark.asyncio
    async def test_mark_completed_is_idempotent(self, unit_env):
        """Completing twice should keep the first completion time."""
        # Arrange
        service = await unit_env.get(PendingAuthService)
        clock = await unit_env.get(FrozenClock)
        identity_id = IdentityId(uuid4())
        await service.begin(identity_id, "a@example.com")

        # Act
        first = await service.mark_completed(identity_id)
        clock.advance(seconds=5)
        second = await service.mark_completed(identity_id)

        # Assert
        assert first.completed is True
        assert second.completed_at == first.completed_at

    @pytest.mark.asyncio
    async def test_mark_completed_without_session_returns_none(self, unit_env):
        """There is nothing to complete without a live session."""
        # Arrange
        service = await unit_env.get(PendingAuthService)

        # Act
        result = await service.mark_completed(IdentityId(uuid4()))

        # Assert
        assert result is None

    @pytest.mark.asyncio
    async def test_get_completed_requires_completion(self, unit_env):
        """Only completed sessions should be returned for finalization."""
        # Arrange
        service = await unit_env.get(PendingAuthService)
        identity_id = IdentityId(uuid4())
        await service.begin(identity_id, "a@example.com")

        # Act
        before = await service.get_completed(identity_id)
        await service.mark_completed(identity_id)
        after = await service.get_completed(identity_id)

        # Assert
        assert before is None
        assert after is not None and after.completed is True

    @pytest.mark.asyncio
    async def test_begin_replaces_existing_session(self, unit_env):
        """A second login should reset a completed session to pending."""
        # Arrange
        service = await unit_env.get(PendingAuthService)
        identity_id = IdentityId(uuid4())
        await service.begin(identity_id, "a@example.com")
        await service.mark_completed(identity_id)

        # Act
        await service.begin(identity_id, "a@example.com")

        # Assert
        session = await service.get(identity_id)
        assert session.completed is False

