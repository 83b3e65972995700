"""Unit tests for TOTPEngine."""

from datetime import timedelta

import pytest

from vouch.config import TOTPSettings
from vouch.domain.service import TOTPEngine
from tests.di import FrozenClock
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked
unit_env = create_env_fixture()

SECRET = "JBSWY3DPEHPK3PXPJBSWY3DPEHPK3PXP"


def _steps(n: int) -> timedelta:
    return timedelta(seconds=30 * n)


class TestSecrets:
    """Tests for secret generation and normalization."""

    @pytest.mark.asyncio
    async def test_generated_secret_is_valid_base32(self, unit_env):
        """Generated secrets should be 32 Base32 characters."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)

        # Act
        secret = engine.generate_secret()

        # Assert
        assert len(secret) == 32
        assert engine.is_valid_secret(secret) is True
        assert secret != engine.generate_secret()

    def test_normalize_strips_non_alphabet_characters(self):
        """Spaces, dashes and lowercase should normalize away."""
        assert TOTPEngine.normalize_secret("jbsw y3dp-ehpk 3pxp") == "JBSWY3DPEHPK3PXP"

    @pytest.mark.asyncio
    async def test_short_secret_is_invalid(self, unit_env):
        """Secrets under 16 characters should be rejected."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)

        # Act & Assert
        assert engine.is_valid_secret("JBSWY3DP") is False

    @pytest.mark.asyncio
    async def test_provisioning_uri_format(self, unit_env):
        """The URI should carry the label, secret and configured issuer."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)

        # Act
        uri = engine.provisioning_uri(SECRET, "user@example.com")

        # Assert
        assert uri == f"otpauth://totp/user@example.com?secret={SECRET}&issuer=Vouch"

    @pytest.mark.asyncio
    async def test_provisioning_uri_escapes_issuer(self, unit_env):
        """Issuers with spaces should be percent-encoded."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)

        # Act
        uri = engine.provisioning_uri(SECRET, "user@example.com", issuer="Acme Corp")

        # Assert
        assert uri.endswith("&issuer=Acme%20Corp")


class TestValidate:
    """Tests for code validation with drift tolerance."""

    @pytest.mark.asyncio
    async def test_current_code_is_valid(self, unit_env):
        """The code for the current step should validate."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)

        # Act
        code = engine.code_at(SECRET)

        # Assert
        assert engine.validate(code, SECRET) is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("offset", [-3, -1, 1, 3])
    async def test_codes_within_tolerance_are_valid(self, unit_env, offset):
        """Codes up to three steps either side should validate."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)
        clock = await unit_env.get(FrozenClock)

        # Act
        code = engine.code_at(SECRET, clock.now() + _steps(offset))

        # Assert
        assert engine.validate(code, SECRET) is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("offset", [-5, 5])
    async def test_codes_outside_tolerance_are_rejected(self, unit_env, offset):
        """Codes five steps away should be rejected by default."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)
        clock = await unit_env.get(FrozenClock)

        # Act
        code = engine.code_at(SECRET, clock.now() + _steps(offset))

        # Assert
        assert engine.validate(code, SECRET) is False

    @pytest.mark.asyncio
    async def test_separators_in_code_are_ignored(self, unit_env):
        """Users may type codes with a space or dash in the middle."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)
        code = engine.code_at(SECRET)

        # Act
        typed = f"{code[:3]} {code[3:]}"

        # Assert
        assert engine.validate(typed, SECRET) is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["12345", "1234567", "abcdef", ""])
    async def test_malformed_codes_are_rejected(self, unit_env, code):
        """Codes that are not six digits should never validate."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)

        # Act & Assert
        assert engine.validate(code, SECRET) is False

    @pytest.mark.asyncio
    async def test_unusable_secret_is_rejected(self, unit_env):
        """An unusable secret should fail validation instead of raising."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)

        # Act & Assert
        assert engine.validate("123456", "not a secret!") is False

    @pytest.mark.asyncio
    async def test_widening_accepts_larger_drift_when_enabled(self, unit_env):
        """With widening on, a code eight steps old should validate."""
        # Arrange
        clock = await unit_env.get(FrozenClock)
        engine = TOTPEngine(settings=TOTPSettings(widen_on_failure=True), clock=clock)
        strict = TOTPEngine(settings=TOTPSettings(), clock=clock)

        # Act
        code = engine.code_at(SECRET, clock.now() - _steps(8))

        # Assert
        assert engine.validate(code, SECRET) is True
        assert strict.validate(code, SECRET) is False

    @pytest.mark.asyncio
    async def test_widening_is_still_bounded(self, unit_env):
        """Even widened, codes beyond the widened tolerance should fail."""
        # Arrange
        clock = await unit_env.get(FrozenClock)
        engine = TOTPEngine(settings=TOTPSettings(widen_on_failure=True), clock=clock)

        # Act
        code = engine.code_at(SECRET, clock.now() - _steps(12))

        # Assert
        assert engine.validate(code, SECRET) is False


class TestDiagnose:
    """Tests for drift diagnosis."""

    @pytest.mark.asyncio
    async def test_diagnose_reports_drift_outside_tolerance(self, unit_env):
        """A code five steps ahead should be found but reported invalid."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)
        clock = await unit_env.get(FrozenClock)
        code = engine.code_at(SECRET, clock.now() + _steps(5))

        # Act
        diagnosis = engine.diagnose(SECRET, code)

        # Assert
        assert diagnosis.matched_offset == 5
        assert diagnosis.valid is False
        assert diagnosis.tolerance == 3

    @pytest.mark.asyncio
    async def test_diagnose_current_code(self, unit_env):
        """The current code should be found at offset zero."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)

        # Act
        diagnosis = engine.diagnose(SECRET, engine.code_at(SECRET))

        # Assert
        assert diagnosis.matched_offset == 0
        assert diagnosis.valid is True
        assert diagnosis.seconds_into_step + diagnosis.seconds_remaining == 30

    @pytest.mark.asyncio
    async def test_diagnose_bad_inputs(self, unit_env):
        """A bad secret or code format should be reported, not raised."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)

        # Act
        diagnosis = engine.diagnose("short", "12")

        # Assert
        assert diagnosis.secret_valid is False
        assert diagnosis.code_format_valid is False
        assert diagnosis.matched_offset is None

    @pytest.mark.asyncio
    async def test_time_remaining_is_within_step(self, unit_env):
        """Seconds remaining should fall in 1..30."""
        # Arrange
        engine = await unit_env.get(TOTPEngine)

        # Act
        remaining = engine.time_remaining()

        # Assert
        assert 1 <= remaining <= 30
