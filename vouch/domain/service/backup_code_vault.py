"""Single-use backup codes for two-factor recovery."""

import re
import secrets
import string

import logfire

from vouch.domain.error import SecretUnavailableError
from vouch.domain.value.common import ValueObject

from .base import Service
from .cipher import SecretCipher

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 8
MASKED_CODE = "****-****"

_SEPARATORS = re.compile(r"[-\s]")
_CODE_SHAPE = re.compile(r"^[A-Z0-9]{8}$")


class BackupCodeCheck(ValueObject):
    """Result of checking a backup code."""

    valid: bool
    remaining_codes: list[str]


class BackupCodeVault(Service):
    """Generates, stores and consumes backup codes.

    Codes are kept as a list of per-code ciphertexts. A matched code is
    removed from the list, which is what makes it single-use.
    """

    def __init__(self, cipher: SecretCipher, count: int = 8) -> None:
        """Initialize backup code vault.

        Args:
            cipher: Cipher used for every stored code
            count: Number of codes generated by default
        """
        self.cipher = cipher
        self.count = count

    @staticmethod
    def normalize(code: str) -> str:
        """Strip dashes and whitespace and uppercase."""
        return _SEPARATORS.sub("", code).upper()

    @classmethod
    def is_valid_format(cls, code: str) -> bool:
        return bool(_CODE_SHAPE.match(cls.normalize(code)))

    @staticmethod
    def format(code: str) -> str:
        """Format 8 significant characters as ``XXXX-XXXX``."""
        return f"{code[:4]}-{code[4:]}"

    def generate(self, n: int | None = None) -> list[str]:
        """Generate plaintext codes formatted ``XXXX-XXXX``."""
        return [
            self.format("".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH)))
            for _ in range(n or self.count)
        ]

    def encrypt_for_storage(self, codes: list[str]) -> list[str]:
        return [self.cipher.encrypt(code) for code in codes]

    def decrypt_for_display(self, encrypted_codes: list[str]) -> list[str]:
        """Decrypt codes for showing to their owner.

        Codes that cannot be decrypted are shown masked.
        """
        displayed = []
        for encrypted in encrypted_codes:
            try:
                displayed.append(self.cipher.decrypt(encrypted))
            except SecretUnavailableError:
                displayed.append(MASKED_CODE)
        if MASKED_CODE in displayed:
            logfire.warn(
                "Backup codes could not be decrypted",
                unreadable=displayed.count(MASKED_CODE),
            )
        return displayed

    def validate_and_consume(
        self, code: str, encrypted_codes: list[str]
    ) -> BackupCodeCheck:
        """Check a submitted code and remove it on match.

        Stored codes that cannot be decrypted are kept, not dropped.

        Args:
            code: Code as typed by the user
            encrypted_codes: Stored ciphertexts, in order

        Returns:
            Whether the code matched, and the list to store from now on
        """
        with logfire.span("backup_code_vault.validate_and_consume"):
            submitted = self.normalize(code)
            if not _CODE_SHAPE.match(submitted):
                return BackupCodeCheck(valid=False, remaining_codes=list(encrypted_codes))

            for index, encrypted in enumerate(encrypted_codes):
                try:
                    stored = self.normalize(self.cipher.decrypt(encrypted))
                except SecretUnavailableError:
                    logfire.warn("Skipping unreadable backup code", position=index)
                    continue
                if secrets.compare_digest(stored, submitted):
                    remaining = encrypted_codes[:index] + encrypted_codes[index + 1 :]
                    logfire.info("Backup code consumed", remaining=len(remaining))
                    return BackupCodeCheck(valid=True, remaining_codes=remaining)

            return BackupCodeCheck(valid=False, remaining_codes=list(encrypted_codes))
