"""Password hashing interface."""

from abc import ABC, abstractmethod


class PasswordHasher(ABC):
    """One-way password hashing."""

    @abstractmethod
    def hash(self, password: str) -> str:
        """Hash a password for storage."""
        pass

    @abstractmethod
    def verify(self, password: str, password_hash: str) -> bool:
        """Check a password against a stored hash.

        Returns False for malformed hashes instead of raising.
        """
        pass
