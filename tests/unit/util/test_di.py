"""Unit tests for provider selection and the test container builder."""

import pytest

from vouch.config import AuthSettings, Settings
from vouch.util.clock import Clock
from vouch.util.di import (
    ClockProvider,
    ProdClockProvider,
    ProdConfigProvider,
    get_provider,
)
from tests.di import FrozenClock, MockClockProvider, build_test_container


class TestGetProvider:
    """Tests for get_provider."""

    def test_concrete_provider_returned_as_is(self):
        """Providers without variants should be used directly."""
        # Act & Assert
        assert get_provider(ProdConfigProvider) is ProdConfigProvider
        assert get_provider(ProdConfigProvider, use_mock=True) is ProdConfigProvider

    def test_mockable_component_selects_variant(self):
        """The flag should pick between production and mock subclasses."""
        # Act & Assert
        assert get_provider(ClockProvider) is ProdClockProvider
        assert get_provider(ClockProvider, use_mock=True) is MockClockProvider


class TestBuildTestContainer:
    """Tests for build_test_container."""

    def test_unknown_component_rejected(self):
        """Typos in unmock should fail loudly."""
        # Act & Assert
        with pytest.raises(ValueError, match="Unknown components"):
            build_test_container(unmock={"mailer"})

    @pytest.mark.asyncio
    async def test_clock_is_frozen_by_default(self):
        """Unit containers should hand out the frozen clock."""
        # Arrange
        container = build_test_container()

        # Act
        try:
            clock = await container.get(Clock)
        finally:
            await container.close()

        # Assert
        assert isinstance(clock, FrozenClock)

    @pytest.mark.asyncio
    async def test_fixed_settings_feed_sections(self):
        """Section settings should come from the fixed instance."""
        # Arrange
        settings = Settings(auth=AuthSettings(lockout_threshold=3))
        container = build_test_container(settings=settings)

        # Act
        try:
            auth = await container.get(AuthSettings)
        finally:
            await container.close()

        # Assert
        assert auth.lockout_threshold == 3
