"""
Credential Hashing and Session Tokens

Passwords are hashed one-way with bcrypt through passlib; the plaintext
is never stored and never logged. Session tokens are opaque random
strings with no meaning beyond their row in the session table.
"""

import secrets

from passlib.context import CryptContext

from src.config import SecuritySettings


class PasswordHasher:
    """One-way hash + verify for passwords."""

    def __init__(self, settings: SecuritySettings):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=settings.bcrypt_rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        """Check a plaintext password against a stored hash."""
        return self._context.verify(password, hashed)


class TokenGenerator:
    """Produces cryptographically random, URL-safe bearer tokens."""

    def __init__(self, settings: SecuritySettings):
        self._nbytes = settings.token_bytes

    def new_token(self) -> str:
        return secrets.token_urlsafe(self._nbytes)
