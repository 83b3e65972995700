"""Unit tests for CredentialVerifier."""

from datetime import timedelta

import pytest

from vouch.domain.event import EventFilter, EventStore
from vouch.domain.model.event import EventType
from vouch.domain.repository import IdentityRepository
from vouch.domain.service import CredentialVerifier, PasswordHasher, RateLimiter
from vouch.domain.value import FAILURE_MESSAGES, AuthProvider, FailureReason
from tests.di import FrozenClock
from tests.factory import TEST_PASSWORD, make_identity, make_settings
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked
unit_env = create_env_fixture()

# Low lockout threshold, rate limit out of the way
lockout_env = create_env_fixture(
    settings=make_settings(
        auth={"lockout_threshold": 3, "lockout_minutes": 15, "rate_limit_attempts": 100}
    )
)


async def _stored_identity(env, **kwargs):
    hasher = await env.get(PasswordHasher)
    repo = await env.get(IdentityRepository)
    return await repo.save(make_identity(hasher, **kwargs))


class TestVerify:
    """Tests for verify with valid and invalid credentials."""

    @pytest.mark.asyncio
    async def test_valid_credentials_succeed(self, unit_env):
        """Correct email and password should return the identity summary."""
        # Arrange
        verifier = await unit_env.get(CredentialVerifier)
        repo = await unit_env.get(IdentityRepository)
        clock = await unit_env.get(FrozenClock)
        identity = await _stored_identity(unit_env)

        # Act
        outcome = await verifier.verify(identity.email, TEST_PASSWORD)

        # Assert
        assert outcome.ok is True
        assert outcome.value.identity_id == identity.id
        assert outcome.value.two_factor_enabled is False
        saved = await repo.find_by_id(identity.id)
        assert saved.last_login_at == clock.now()

    @pytest.mark.asyncio
    async def test_email_is_matched_case_insensitively(self, unit_env):
        """Email should be normalized before lookup."""
        # Arrange
        verifier = await unit_env.get(CredentialVerifier)
        await _stored_identity(unit_env, email="mixed@example.com")

        # Act
        outcome = await verifier.verify("  Mixed@Example.COM ", TEST_PASSWORD)

        # Assert
        assert outcome.ok is True

    @pytest.mark.asyncio
    async def test_success_publishes_logged_in_event(self, unit_env):
        """A verified login should be recorded as user.logged_in."""
        # Arrange
        verifier = await unit_env.get(CredentialVerifier)
        store = await unit_env.get(EventStore)
        identity = await _stored_identity(unit_env)

        # Act
        await verifier.verify(identity.email, TEST_PASSWORD)

        # Assert
        events = await store.query(EventFilter(types=[EventType.USER_LOGGED_IN.value]))
        assert len(events) == 1
        assert events[0].metadata.user_id == identity.id
        assert events[0].payload.method == "credentials"

    @pytest.mark.asyncio
    async def test_wrong_password_fails_and_counts(self, unit_env):
        """A wrong password should fail and count one attempt."""
        # Arrange
        verifier = await unit_env.get(CredentialVerifier)
        limiter = await unit_env.get(RateLimiter)
        repo = await unit_env.get(IdentityRepository)
        identity = await _stored_identity(unit_env)

        # Act
        outcome = await verifier.verify(identity.email, "wrong password")

        # Assert
        assert outcome.ok is False
        assert outcome.reason == FailureReason.INVALID_CREDENTIALS
        assert await limiter.check(identity.email) == 1
        saved = await repo.find_by_id(identity.id)
        assert saved.login_attempts == 1

    @pytest.mark.asyncio
    async def test_unknown_email_is_indistinguishable(self, unit_env):
        """An unknown email should fail exactly like a wrong password."""
        # Arrange
        verifier = await unit_env.get(CredentialVerifier)
        limiter = await unit_env.get(RateLimiter)
        identity = await _stored_identity(unit_env)

        # Act
        unknown = await verifier.verify("ghost@example.com", "whatever")
        wrong = await verifier.verify(identity.email, "whatever")

        # Assert
        assert unknown.reason == wrong.reason == FailureReason.INVALID_CREDENTIALS
        assert unknown.message == wrong.message
        assert await limiter.check("ghost@example.com") == 1

    @pytest.mark.asyncio
    async def test_provider_only_identity_cannot_use_password(self, unit_env):
        """An identity without a password should never pass a password check."""
        # Arrange
        verifier = await unit_env.get(CredentialVerifier)
        identity = await _stored_identity(
            unit_env, password=None, providers=frozenset({AuthProvider.GOOGLE})
        )

        # Act
        outcome = await verifier.verify(identity.email, "anything")

        # Assert
        assert outcome.reason == FailureReason.INVALID_CREDENTIALS

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email,password",
        [("not-an-email", "secret"), ("a@example.com", ""), ("", "secret")],
    )
    async def test_malformed_input_is_rejected_without_counting(
        self, unit_env, email, password
    ):
        """Malformed input should fail validation and not touch the limiter."""
        # Arrange
        verifier = await unit_env.get(CredentialVerifier)
        limiter = await unit_env.get(RateLimiter)

        # Act
        outcome = await verifier.verify(email, password)

        # Assert
        assert outcome.reason == FailureReason.VALIDATION_ERROR
        assert await limiter.check("a@example.com") == 0


class TestRateLimit:
    """Tests for the per-email attempt limit."""

    @pytest.mark.asyncio
    async def test_limit_blocks_even_correct_password(self, unit_env, monkeypatch):
        """Once limited, the password should not be compared at all."""
        # Arrange
        verifier = await unit_env.get(CredentialVerifier)
        limiter = await unit_env.get(RateLimiter)
        identity = await _stored_identity(unit_env)
        for _ in range(limiter.limit):
            await verifier.verify(identity.email, "wrong password")

        compared = []
        real_verify = verifier.password_hasher.verify

        def spy(password, password_hash):
            compared.append(password)
            return real_verify(password, password_hash)

        monkeypatch.setattr(verifier.password_hasher, "verify", spy)

        # Act
        outcome = await verifier.verify(identity.email, TEST_PASSWORD)

        # Assert
        assert outcome.reason == FailureReason.RATE_LIMIT_EXCEEDED
        assert compared == []

    @pytest.mark.asyncio
    async def test_limit_publishes_rate_limit_event(self, unit_env):
        """A limited attempt should publish security.rate_limit_exceeded."""
        # Arrange
        verifier = await unit_env.get(CredentialVerifier)
        limiter = await unit_env.get(RateLimiter)
        store = await unit_env.get(EventStore)
        for _ in range(limiter.limit):
            await limiter.increment("flood@example.com")

        # Act
        await verifier.verify("flood@example.com", "whatever")

        # Assert
        events = await store.by_type(EventType.SECURITY_RATE_LIMIT_EXCEEDED.value)
        assert len(events) == 1
        assert events[0].payload.identifier == "flood@example.com"
        assert events[0].payload.attempts == limiter.limit

    @pytest.mark.asyncio
    async def test_limit_lifts_after_window(self, unit_env):
        """After the window the correct password should work again."""
        # Arrange
        verifier = await unit_env.get(CredentialVerifier)
        limiter = await unit_env.get(RateLimiter)
        clock = await unit_env.get(FrozenClock)
        identity = await _stored_identity(unit_env)
        for _ in range(limiter.limit):
            await limiter.increment(identity.email)

        # Act
        clock.advance(seconds=limiter.window_seconds)
        outcome = await verifier.verify(identity.email, TEST_PASSWORD)

        # Assert
        assert outcome.ok is True

    @pytest.mark.asyncio
    async def test_success_resets_counter(self, unit_env):
        """A successful login should clear earlier failures."""
        # Arrange
        verifier = await unit_env.get(CredentialVerifier)
        limiter = await unit_env.get(RateLimiter)
        identity = await _stored_identity(unit_env)
        await verifier.verify(identity.email, "wrong password")
        await verifier.verify(identity.email, "wrong password")

        # Act
        await verifier.verify(identity.email, TEST_PASSWORD)

        # Assert
        assert await limiter.check(identity.email) == 0


class TestLockout:
    """Tests for the per-identity lockout."""

    @pytest.mark.asyncio
    async def test_threshold_locks_identity(self, lockout_env):
        """Reaching the mismatch threshold should lock the identity."""
        # Arrange
        verifier = await lockout_env.get(CredentialVerifier)
        repo = await lockout_env.get(IdentityRepository)
        clock = await lockout_env.get(FrozenClock)
        store = await lockout_env.get(EventStore)
        identity = await _stored_identity(lockout_env)

        # Act
        for _ in range(3):
            await verifier.verify(identity.email, "wrong password")

        # Assert
        saved = await repo.find_by_id(identity.id)
        assert saved.locked_until == clock.now() + timedelta(minutes=15)
        assert saved.login_attempts == 0
        locked = await store.by_type(EventType.SECURITY_ACCOUNT_LOCKED.value)
        assert len(locked) == 1
        assert locked[0].payload.failed_attempts == 3

    @pytest.mark.asyncio
    async def test_locked_identity_rejects_correct_password(self, lockout_env):
        """A locked identity should be refused with the generic message."""
        # Arrange
        verifier = await lockout_env.get(CredentialVerifier)
        identity = await _stored_identity(lockout_env)
        for _ in range(3):
            await verifier.verify(identity.email, "wrong password")

        # Act
        outcome = await verifier.verify(identity.email, TEST_PASSWORD)

        # Assert
        assert outcome.reason == FailureReason.ACCOUNT_LOCKED
        assert outcome.message == FAILURE_MESSAGES[FailureReason.INVALID_CREDENTIALS]

    @pytest.mark.asyncio
    async def test_lock_expires(self, lockout_env):
        """After the lockout period the correct password should work."""
        # Arrange
        verifier = await lockout_env.get(CredentialVerifier)
        clock = await lockout_env.get(FrozenClock)
        identity = await _stored_identity(lockout_env)
        for _ in range(3):
            await verifier.verify(identity.email, "wrong password")

        # Act
        clock.advance(minutes=15)
        outcome = await verifier.verify(identity.email, TEST_PASSWORD)

        # Assert
        assert outcome.ok is True
