"""Symmetric encryption of small secrets."""

from abc import ABC, abstractmethod


class SecretCipher(ABC):
    """Encrypts TOTP seeds and backup codes at rest.

    ``decrypt`` raises SecretUnavailableError for ciphertext it cannot read;
    callers treat that as "value unavailable", never as fatal.
    """

    @abstractmethod
    def encrypt(self, plaintext: str) -> str:
        """Encrypt a secret.

        Args:
            plaintext: Secret to protect

        Returns:
            Opaque ciphertext string
        """
        pass

    @abstractmethod
    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a secret.

        Args:
            ciphertext: Value previously returned by ``encrypt``

        Returns:
            The original plaintext

        Raises:
            SecretUnavailableError: If the ciphertext is invalid or was
                produced with a different key
        """
        pass
