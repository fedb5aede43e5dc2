"""Authentication: sign-up, sign-in, and bearer-token resolution."""

from src.auth.gateway import (
    AuthGateway,
    SessionTokenResolver,
    TokenResolver,
    extract_bearer_token,
    normalize_email,
)

__all__ = [
    "AuthGateway",
    "SessionTokenResolver",
    "TokenResolver",
    "extract_bearer_token",
    "normalize_email",
]
