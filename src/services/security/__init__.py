"""Security services: password hashing, session tokens, markup stripping."""

from src.services.security.credentials import PasswordHasher, TokenGenerator
from src.services.security.sanitizer import strip_markup, strip_optional

__all__ = [
    "PasswordHasher",
    "TokenGenerator",
    "strip_markup",
    "strip_optional",
]
