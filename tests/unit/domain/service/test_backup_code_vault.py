"""Unit tests for BackupCodeVault."""

import re

import pytest

from vouch.adapter.crypto import FernetSecretCipher
from vouch.domain.service import BackupCodeVault
from vouch.domain.service.backup_code_vault import MASKED_CODE
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked
unit_env = create_env_fixture()

CODE_FORMAT = re.compile(r"^[A-Z0-9]{4}-[A-Z0-9]{4}$")


class TestGenerate:
    """Tests for code generation."""

    @pytest.mark.asyncio
    async def test_generates_configured_number_of_formatted_codes(self, unit_env):
        """Default generation should yield eight XXXX-XXXX codes."""
        # Arrange
        vault = await unit_env.get(BackupCodeVault)

        # Act
        codes = vault.generate()

        # Assert
        assert len(codes) == 8
        assert all(CODE_FORMAT.match(code) for code in codes)
        assert len(set(codes)) == 8

    @pytest.mark.asyncio
    async def test_generates_requested_count(self, unit_env):
        """An explicit count should override the default."""
        # Arrange
        vault = await unit_env.get(BackupCodeVault)

        # Act & Assert
        assert len(vault.generate(3)) == 3

    def test_format_validation_accepts_loose_input(self):
        """Lowercase and missing dashes should still be a valid shape."""
        assert BackupCodeVault.is_valid_format("abcd-1234") is True
        assert BackupCodeVault.is_valid_format("ABCD1234") is True
        assert BackupCodeVault.is_valid_format("ABCD-123") is False
        assert BackupCodeVault.is_valid_format("ABCD-12!4") is False


class TestValidateAndConsume:
    """Tests for single-use consumption."""

    @pytest.mark.asyncio
    async def test_matching_code_is_removed(self, unit_env):
        """A matching code should validate once and leave the others in order."""
        # Arrange
        vault = await unit_env.get(BackupCodeVault)
        codes = vault.generate(4)
        stored = vault.encrypt_for_storage(codes)

        # Act
        check = vault.validate_and_consume(codes[1], stored)

        # Assert
        assert check.valid is True
        assert check.remaining_codes == [stored[0], stored[2], stored[3]]

    @pytest.mark.asyncio
    async def test_consumed_code_cannot_be_reused(self, unit_env):
        """A code should be rejected against the list left after using it."""
        # Arrange
        vault = await unit_env.get(BackupCodeVault)
        codes = vault.generate(2)
        first = vault.validate_and_consume(codes[0], vault.encrypt_for_storage(codes))

        # Act
        second = vault.validate_and_consume(codes[0], first.remaining_codes)

        # Assert
        assert second.valid is False
        assert second.remaining_codes == first.remaining_codes

    @pytest.mark.asyncio
    async def test_code_matches_case_and_separator_insensitively(self, unit_env):
        """Users may type codes in lowercase and without the dash."""
        # Arrange
        vault = await unit_env.get(BackupCodeVault)
        codes = vault.generate(1)
        stored = vault.encrypt_for_storage(codes)

        # Act
        check = vault.validate_and_consume(codes[0].replace("-", "").lower(), stored)

        # Assert
        assert check.valid is True
        assert check.remaining_codes == []

    @pytest.mark.asyncio
    async def test_malformed_code_leaves_list_untouched(self, unit_env):
        """A malformed submission should not be compared at all."""
        # Arrange
        vault = await unit_env.get(BackupCodeVault)
        stored = vault.encrypt_for_storage(vault.generate(2))

        # Act
        check = vault.validate_and_consume("nope", stored)

        # Assert
        assert check.valid is False
        assert check.remaining_codes == stored

    @pytest.mark.asyncio
    async def test_unreadable_codes_are_kept(self, unit_env):
        """Ciphertexts from another key should be skipped, not dropped."""
        # Arrange
        vault = await unit_env.get(BackupCodeVault)
        foreign = FernetSecretCipher("another key").encrypt("ZZZZ-ZZZZ")
        codes = vault.generate(1)
        stored = [foreign, *vault.encrypt_for_storage(codes)]

        # Act
        check = vault.validate_and_consume(codes[0], stored)

        # Assert
        assert check.valid is True
        assert check.remaining_codes == [foreign]


class TestDisplay:
    """Tests for decrypting codes for display."""

    @pytest.mark.asyncio
    async def test_decrypt_for_display_masks_unreadable(self, unit_env):
        """Unreadable codes should be shown masked."""
        # Arrange
        vault = await unit_env.get(BackupCodeVault)
        codes = vault.generate(2)
        stored = [*vault.encrypt_for_storage(codes), "garbage"]

        # Act
        displayed = vault.decrypt_for_display(stored)

        # Assert
        assert displayed == [*codes, MASKED_CODE]
