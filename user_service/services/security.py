"""Password hashing and session token generation."""

import secrets

from passlib.context import CryptContext

TOKEN_BYTES = 32


class PasswordHasher:
    """Salted bcrypt hashing with a configurable work factor."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
            bcrypt__truncate_error=True,
        )

    def hash(self, password: str) -> str:
        """Hash a password."""
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against its hash."""
        return self._context.verify(password, password_hash)

    def dummy_verify(self) -> None:
        """Spend the time a real verification would, without a stored hash."""
        self._context.dummy_verify()


def generate_token() -> str:
    """Create an unpredictable opaque session token."""
    return secrets.token_urlsafe(TOKEN_BYTES)
