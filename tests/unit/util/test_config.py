"""Unit tests for application settings."""

import pytest
from pydantic import ValidationError

from vouch.config import AuthSettings, Settings, TOTPSettings


class TestDefaults:
    """Tests for default values."""

    def test_auth_defaults(self):
        """Rate limit and lockout defaults should match the documented policy."""
        # Act
        auth = AuthSettings()

        # Assert
        assert auth.rate_limit_attempts == 10
        assert auth.rate_limit_window_seconds == 60
        assert auth.lockout_threshold == 20
        assert auth.lockout_minutes == 15
        assert auth.pending_auth_ttl_seconds == 300
        assert auth.link_token_ttl_minutes == 15

    def test_widened_totp_window_is_off_by_default(self):
        """The wide retry window should need explicit opt-in."""
        # Act
        totp = TOTPSettings()

        # Assert
        assert totp.widen_on_failure is False
        assert totp.tolerance == 3


class TestEnvironment:
    """Tests for environment loading."""

    def test_nested_values_from_environment(self, monkeypatch):
        """Double-underscore variables should populate nested sections."""
        # Arrange
        monkeypatch.setenv("AUTH__LOCKOUT_THRESHOLD", "5")
        monkeypatch.setenv("TOTP__ISSUER", "Acme")

        # Act
        settings = Settings()

        # Assert
        assert settings.auth.lockout_threshold == 5
        assert settings.totp.issuer == "Acme"


class TestProductionSecrets:
    """Tests for the production placeholder check."""

    def test_placeholder_secrets_refused_in_production(self, monkeypatch):
        """Production should not start with the shipped placeholder secrets."""
        # Arrange
        monkeypatch.delenv("AUTH__JWT_SECRET", raising=False)
        monkeypatch.delenv("AUTH__ENCRYPTION_KEY", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "production")

        # Act & Assert
        with pytest.raises(ValidationError, match="auth.jwt_secret"):
            Settings(_env_file=None)

    def test_real_secrets_accepted_in_production(self, monkeypatch):
        """Overridden secrets should pass the check."""
        # Arrange
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("AUTH__JWT_SECRET", "a-real-secret")
        monkeypatch.setenv("AUTH__ENCRYPTION_KEY", "a-real-key")

        # Act
        settings = Settings(_env_file=None)

        # Assert
        assert settings.environment == "production"

    def test_placeholders_allowed_outside_production(self, monkeypatch):
        """Development may run with placeholder secrets."""
        # Arrange
        monkeypatch.delenv("AUTH__JWT_SECRET", raising=False)
        monkeypatch.delenv("AUTH__ENCRYPTION_KEY", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "development")

        # Act
        settings = Settings(_env_file=None)

        # Assert
        assert settings.auth.jwt_secret == "CHANGE_ME_IN_PRODUCTION"
