"""bcrypt password hashing."""

import bcrypt

from vouch.domain.service.password import PasswordHasher


class BcryptPasswordHasher(PasswordHasher):
    """Password hashing with bcrypt."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            # Malformed stored hash
            return False
