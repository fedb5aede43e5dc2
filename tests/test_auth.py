"""Tests for sign-up, sign-in and token resolution."""

import pytest

from src.auth import (
    AuthGateway,
    SessionTokenResolver,
    extract_bearer_token,
    normalize_email,
)
from src.auth.gateway import (
    EMAIL_TAKEN,
    INVALID_TOKEN,
    NAME_REQUIRED,
    USER_NOT_FOUND,
    WRONG_PASSWORD,
)
from src.errors import AuthError, BadRequestError, ConflictError, NotFoundError
from src.models import Session
from src.services.security import PasswordHasher, TokenGenerator
from src.services.storage import (
    DuplicateError,
    MemorySessionStorage,
    MemoryUserStorage,
)


class CollidingSessionStorage(MemorySessionStorage):
    """Fails the first replacement the way a concurrent insert would."""

    def __init__(self, client):
        super().__init__(client)
        self.attempts = 0

    async def replace_session(self, session: Session) -> Session:
        self.attempts += 1
        if self.attempts == 1:
            raise DuplicateError("UNIQUE constraint failed: sessions.user_id")
        return await super().replace_session(session)


class TestHelpers:
    """Tests for header parsing and email normalization."""

    def test_extract_bearer_token(self):
        assert extract_bearer_token("Bearer abc") == "abc"
        assert extract_bearer_token("Bearer   abc  ") == "abc"

    def test_extract_rejects_other_schemes(self):
        assert extract_bearer_token(None) is None
        assert extract_bearer_token("") is None
        assert extract_bearer_token("Basic abc") is None
        assert extract_bearer_token("Bearer ") is None

    def test_normalize_email(self):
        assert normalize_email("  Ana@Example.COM ") == "ana@example.com"


class TestAuthGateway:
    """Tests for registration and login flows."""

    async def test_sign_up_then_sign_in(self, gateway, resolver):
        """Test that a registered user can sign in and use the token."""
        user = await gateway.sign_up("Ana", "ana@example.com", "secret")
        assert user.password_hash != "secret"

        result = await gateway.sign_in("ana@example.com", "secret")
        assert result.name == "Ana"
        assert await resolver.resolve_token(result.token) == user.id

    async def test_sign_up_strips_markup_from_name(self, gateway):
        result = await gateway.sign_up("<b>Ana</b>", "ana@example.com", "secret")
        assert result.name == "Ana"

    async def test_duplicate_email_is_case_insensitive(self, gateway):
        """Test that the same address in other case is a duplicate."""
        await gateway.sign_up("Ana", "ana@example.com", "secret")
        with pytest.raises(ConflictError) as exc_info:
            await gateway.sign_up("Other", "ANA@example.com", "secret")
        assert exc_info.value.message == EMAIL_TAKEN
        assert exc_info.value.status_code == 409

    async def test_sign_in_unknown_email(self, gateway):
        with pytest.raises(NotFoundError) as exc_info:
            await gateway.sign_in("nobody@example.com", "secret")
        assert exc_info.value.message == USER_NOT_FOUND

    async def test_sign_in_wrong_password(self, gateway):
        await gateway.sign_up("Ana", "ana@example.com", "secret")
        with pytest.raises(AuthError) as exc_info:
            await gateway.sign_in("ana@example.com", "wrong")
        assert exc_info.value.message == WRONG_PASSWORD
        assert exc_info.value.status_code == 401

    async def test_new_sign_in_invalidates_previous_token(self, gateway, resolver):
        """Test that only the latest session's token is accepted."""
        await gateway.sign_up("Ana", "ana@example.com", "secret")
        first = await gateway.sign_in("ana@example.com", "secret")
        second = await gateway.sign_in("ana@example.com", "secret")

        assert first.token != second.token
        with pytest.raises(AuthError):
            await resolver.resolve_token(first.token)
        assert await resolver.resolve_token(second.token)

    async def test_resolve_missing_or_unknown_token(self, resolver):
        for token in (None, "", "not-a-token"):
            with pytest.raises(AuthError) as exc_info:
                await resolver.resolve_token(token)
            assert exc_info.value.message == INVALID_TOKEN

    async def test_sign_up_name_empty_once_sanitized(self, gateway):
        with pytest.raises(BadRequestError) as exc_info:
            await gateway.sign_up("<b></b>", "ana@example.com", "secret")
        assert exc_info.value.message == NAME_REQUIRED

    async def test_session_replace_retried_after_collision(self, memory_client, settings):
        """Test that a sign-in racing another sign-in still gets a session."""
        sessions = CollidingSessionStorage(memory_client)
        gateway = AuthGateway(
            user_storage=MemoryUserStorage(memory_client),
            session_storage=sessions,
            hasher=PasswordHasher(settings.security),
            tokens=TokenGenerator(settings.security),
        )
        user = await gateway.sign_up("Ana", "ana@example.com", "secret")

        result = await gateway.sign_in("ana@example.com", "secret")

        assert sessions.attempts == 2
        resolver = SessionTokenResolver(sessions)
        assert await resolver.resolve_token(result.token) == user.id
