"""Unit tests for the two-factor enrollment use cases."""

import base64

import pytest

from vouch.application.usecase.two_factor import (
    DisableTwoFactorRequest,
    DisableTwoFactorUseCase,
    EnableTwoFactorRequest,
    EnableTwoFactorUseCase,
    RegenerateBackupCodesRequest,
    RegenerateBackupCodesUseCase,
    SetupTwoFactorRequest,
    SetupTwoFactorUseCase,
)
from vouch.domain.event import EventFilter, EventStore
from vouch.domain.model.event import EventType
from vouch.domain.repository import IdentityRepository
from vouch.domain.service import (
    BackupCodeVault,
    PasswordHasher,
    SecretCipher,
    TOTPEngine,
)
from vouch.domain.value import FailureReason, SecondFactorMethod
from tests.di import FrozenClock
from tests.factory import TEST_PASSWORD, make_identity, wrong_totp_code
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked
unit_env = create_env_fixture()


async def _stored_identity(env, **kwargs):
    hasher = await env.get(PasswordHasher)
    repo = await env.get(IdentityRepository)
    return await repo.save(make_identity(hasher, **kwargs))


async def _enrolled(env):
    """Identity that ran setup and enable.

    Returns:
        (identity id, plaintext secret, plaintext backup codes)
    """
    engine = await env.get(TOTPEngine)
    setup = await env.get(SetupTwoFactorUseCase)
    enable = await env.get(EnableTwoFactorUseCase)
    identity = await _stored_identity(env)

    started = await setup.execute(SetupTwoFactorRequest(identity_id=identity.id))
    secret = started.value.secret
    await enable.execute(
        EnableTwoFactorRequest(identity_id=identity.id, code=engine.code_at(secret))
    )
    return identity.id, secret, started.value.backup_codes


class TestSetup:
    """Tests for SetupTwoFactorUseCase."""

    @pytest.mark.asyncio
    async def test_setup_returns_enrollment_material(self, unit_env):
        """Setup should return the secret, provisioning URI, QR image and codes."""
        # Arrange
        setup = await unit_env.get(SetupTwoFactorUseCase)
        identity = await _stored_identity(unit_env, email="ada@example.com")

        # Act
        outcome = await setup.execute(SetupTwoFactorRequest(identity_id=identity.id))

        # Assert
        assert outcome.ok is True
        response = outcome.value
        assert len(response.secret) == 32
        assert response.provisioning_uri.startswith("otpauth://totp/")
        assert f"secret={response.secret}" in response.provisioning_uri
        assert "issuer=Vouch" in response.provisioning_uri
        prefix = "data:image/svg+xml;base64,"
        assert response.qr_code.startswith(prefix)
        assert b"<svg" in base64.b64decode(response.qr_code[len(prefix):])
        assert len(response.backup_codes) == 8

    @pytest.mark.asyncio
    async def test_setup_stores_ciphertexts_and_leaves_two_factor_off(self, unit_env):
        """The secret and codes should be stored encrypted, enrollment pending."""
        # Arrange
        setup = await unit_env.get(SetupTwoFactorUseCase)
        repo = await unit_env.get(IdentityRepository)
        cipher = await unit_env.get(SecretCipher)
        identity = await _stored_identity(unit_env)

        # Act
        outcome = await setup.execute(SetupTwoFactorRequest(identity_id=identity.id))

        # Assert
        saved = await repo.find_by_id(identity.id)
        assert saved.two_factor_enabled is False
        assert saved.two_factor_secret != outcome.value.secret
        assert cipher.decrypt(saved.two_factor_secret) == outcome.value.secret
        assert outcome.value.backup_codes[0] not in saved.backup_codes

    @pytest.mark.asyncio
    async def test_setup_refused_when_already_enabled(self, unit_env):
        """An enrolled identity should not be able to re-run setup."""
        # Arrange
        setup = await unit_env.get(SetupTwoFactorUseCase)
        identity_id, _, _ = await _enrolled(unit_env)

        # Act
        outcome = await setup.execute(SetupTwoFactorRequest(identity_id=identity_id))

        # Assert
        assert outcome.reason == FailureReason.TWO_FACTOR_ALREADY_ENABLED


class TestEnable:
    """Tests for EnableTwoFactorUseCase."""

    @pytest.mark.asyncio
    async def test_enable_with_valid_code(self, unit_env):
        """A code from the new secret should turn two-factor on."""
        # Arrange
        repo = await unit_env.get(IdentityRepository)
        clock = await unit_env.get(FrozenClock)
        store = await unit_env.get(EventStore)

        # Act
        identity_id, _, codes = await _enrolled(unit_env)

        # Assert
        saved = await repo.find_by_id(identity_id)
        assert saved.two_factor_enabled is True
        assert saved.two_factor_enabled_at == clock.now()
        enabled = await store.query(
            EventFilter(types=[EventType.USER_TWO_FACTOR_ENABLED.value])
        )
        assert enabled[0].payload.backup_code_count == len(codes)

    @pytest.mark.asyncio
    async def test_enable_with_wrong_code_keeps_two_factor_off(self, unit_env):
        """A wrong code should not enable anything."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)
        setup = await unit_env.get(SetupTwoFactorUseCase)
        enable = await unit_env.get(EnableTwoFactorUseCase)
        repo = await unit_env.get(IdentityRepository)
        identity = await _stored_identity(unit_env)
        started = await setup.execute(SetupTwoFactorRequest(identity_id=identity.id))

        # Act
        outcome = await enable.execute(
            EnableTwoFactorRequest(
                identity_id=identity.id,
                code=wrong_totp_code(engine, started.value.secret),
            )
        )

        # Assert
        assert outcome.reason == FailureReason.TOTP_INVALID
        saved = await repo.find_by_id(identity.id)
        assert saved.two_factor_enabled is False

    @pytest.mark.asyncio
    async def test_enable_without_setup(self, unit_env):
        """Enable should be refused when no secret was generated."""
        # Arrange
        enable = await unit_env.get(EnableTwoFactorUseCase)
        identity = await _stored_identity(unit_env)

        # Act
        outcome = await enable.execute(
            EnableTwoFactorRequest(identity_id=identity.id, code="123456")
        )

        # Assert
        assert outcome.reason == FailureReason.TWO_FACTOR_NOT_ENABLED


class TestDisable:
    """Tests for DisableTwoFactorUseCase."""

    @pytest.mark.asyncio
    async def test_disable_clears_secret_and_codes(self, unit_env):
        """Password plus a valid code should remove all two-factor material."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)
        disable = await unit_env.get(DisableTwoFactorUseCase)
        repo = await unit_env.get(IdentityRepository)
        identity_id, secret, _ = await _enrolled(unit_env)

        # Act
        outcome = await disable.execute(
            DisableTwoFactorRequest(
                identity_id=identity_id,
                password=TEST_PASSWORD,
                code=engine.code_at(secret),
            )
        )

        # Assert
        assert outcome.ok is True
        saved = await repo.find_by_id(identity_id)
        assert saved.two_factor_enabled is False
        assert saved.two_factor_secret is None
        assert saved.backup_codes == []

    @pytest.mark.asyncio
    async def test_disable_with_backup_code(self, unit_env):
        """A backup code should be accepted in place of a TOTP code."""
        # Arrange
        disable = await unit_env.get(DisableTwoFactorUseCase)
        identity_id, _, codes = await _enrolled(unit_env)

        # Act
        outcome = await disable.execute(
            DisableTwoFactorRequest(
                identity_id=identity_id,
                password=TEST_PASSWORD,
                code=codes[3],
                method=SecondFactorMethod.BACKUP_CODE,
            )
        )

        # Assert
        assert outcome.ok is True

    @pytest.mark.asyncio
    async def test_disable_requires_password(self, unit_env):
        """A wrong password should be refused before the code is checked."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)
        disable = await unit_env.get(DisableTwoFactorUseCase)
        repo = await unit_env.get(IdentityRepository)
        identity_id, secret, _ = await _enrolled(unit_env)

        # Act
        outcome = await disable.execute(
            DisableTwoFactorRequest(
                identity_id=identity_id, password="wrong", code=engine.code_at(secret)
            )
        )

        # Assert
        assert outcome.reason == FailureReason.INVALID_PASSWORD
        saved = await repo.find_by_id(identity_id)
        assert saved.two_factor_enabled is True

    @pytest.mark.asyncio
    async def test_disable_when_not_enabled(self, unit_env):
        """Disabling with nothing enrolled should be refused."""
        # Arrange
        disable = await unit_env.get(DisableTwoFactorUseCase)
        identity = await _stored_identity(unit_env)

        # Act
        outcome = await disable.execute(
            DisableTwoFactorRequest(
                identity_id=identity.id, password=TEST_PASSWORD, code="123456"
            )
        )

        # Assert
        assert outcome.reason == FailureReason.TWO_FACTOR_NOT_ENABLED


class TestRegenerateBackupCodes:
    """Tests for RegenerateBackupCodesUseCase."""

    @pytest.mark.asyncio
    async def test_regenerate_replaces_every_code(self, unit_env):
        """Old codes should stop working and the new ones be stored encrypted."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)
        regenerate = await unit_env.get(RegenerateBackupCodesUseCase)
        repo = await unit_env.get(IdentityRepository)
        vault = await unit_env.get(BackupCodeVault)
        identity_id, secret, old_codes = await _enrolled(unit_env)

        # Act
        outcome = await regenerate.execute(
            RegenerateBackupCodesRequest(identity_id=identity_id, code=engine.code_at(secret))
        )

        # Assert
        assert outcome.ok is True
        new_codes = outcome.value.backup_codes
        assert len(new_codes) == 8
        saved = await repo.find_by_id(identity_id)
        assert vault.decrypt_for_display(saved.backup_codes) == new_codes
        assert vault.validate_and_consume(old_codes[0], saved.backup_codes).valid is False

    @pytest.mark.asyncio
    async def test_regenerate_requires_valid_code(self, unit_env):
        """A wrong code should leave the existing codes untouched."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)
        regenerate = await unit_env.get(RegenerateBackupCodesUseCase)
        repo = await unit_env.get(IdentityRepository)
        identity_id, secret, _ = await _enrolled(unit_env)
        before = (await repo.find_by_id(identity_id)).backup_codes

        # Act
        outcome = await regenerate.execute(
            RegenerateBackupCodesRequest(
                identity_id=identity_id, code=wrong_totp_code(engine, secret)
            )
        )

        # Assert
        assert outcome.reason == FailureReason.TOTP_INVALID
        assert (await repo.find_by_id(identity_id)).backup_codes == before
