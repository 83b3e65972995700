"""Fernet-backed secret cipher."""

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from vouch.domain.error import SecretUnavailableError
from vouch.domain.service.cipher import SecretCipher


def derive_fernet_key(passphrase: str) -> bytes:
    """Derive a Fernet key from an arbitrary-length passphrase."""
    digest = hashlib.sha256(passphrase.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest)


class FernetSecretCipher(SecretCipher):
    """Authenticated symmetric encryption (AES-128-CBC + HMAC) via Fernet."""

    def __init__(self, passphrase: str) -> None:
        """Initialize cipher.

        Args:
            passphrase: Secret the encryption key is derived from
        """
        self._fernet = Fernet(derive_fernet_key(passphrase))

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        try:
            return self._fernet.decrypt(ciphertext.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError) as e:
            raise SecretUnavailableError("Secret could not be decrypted") from e
