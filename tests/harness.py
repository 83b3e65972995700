"""Fixture factory shared by unit and integration tests."""

import pytest_asyncio

from vouch.config import Settings
from vouch.util.di import Component
from tests.di import build_test_container


def create_env_fixture(
    unmock: set[Component] | None = None, settings: Settings | None = None
):
    """Make a fixture yielding a request-scoped container.

    The APP container is closed after the test, which drains the event bus
    so observer side effects are visible once the fixture is torn down.

    Args:
        unmock: Components that should use their real implementation
        settings: Fixed settings instead of the environment

    Usage:
        unit_env = create_env_fixture()
        integration_env = create_env_fixture(unmock={"persistence"})

        @pytest.mark.asyncio
        async def test_login(unit_env):
            usecase = await unit_env.get(PasswordLoginUseCase)
    """

    @pytest_asyncio.fixture
    async def _env():
        container = build_test_container(unmock=unmock, settings=settings)
        try:
            async with container() as request_container:
                yield request_container
        finally:
            await container.close()

    return _env
