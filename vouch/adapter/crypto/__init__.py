"""Cryptographic adapters."""

from .cipher import FernetSecretCipher
from .password import BcryptPasswordHasher

__all__ = ["FernetSecretCipher", "BcryptPasswordHasher"]
