"""
Auth Gateway

Sign-up, sign-in and bearer-token resolution.

DESIGN DECISION: Token resolution is a capability of its own
(TokenResolver). Business logic only ever sees the resolved user id, so
the session-table lookup can be replaced by a signed-token scheme
without touching categories or transactions.

Sessions: one per user. Signing in again replaces the previous session,
which invalidates the previous token.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

from src.errors import (
    AuthError,
    BadRequestError,
    ConflictError,
    NotFoundError,
    translate_storage_errors,
)
from src.logger import get_logger
from src.models.ledger import Session, SignInResult, User
from src.services.security import PasswordHasher, TokenGenerator, strip_markup
from src.services.storage import (
    DuplicateError,
    SessionStorageInterface,
    UserStorageInterface,
)


EMAIL_TAKEN = "E-mail address is already used!"
USER_NOT_FOUND = "User not found"
WRONG_PASSWORD = "Wrong password"
INVALID_TOKEN = "Invalid token! Please login again!"
NAME_REQUIRED = "Name is required!"

BEARER_PREFIX = "Bearer "

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    """Emails match case- and whitespace-insensitively."""
    return strip_markup(email).lower()


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Pull the token out of an Authorization header value.

    Returns None when the header is absent, uses another scheme, or
    carries an empty token.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


class TokenResolver(ABC):
    """Turns a bearer token into the id of the user it belongs to."""

    @abstractmethod
    async def resolve_token(self, token: Optional[str]) -> str:
        """
        Raises:
            AuthError: If the token is missing or unknown
        """
        pass


class SessionTokenResolver(TokenResolver):
    """Resolves tokens by looking them up in the session store."""

    def __init__(self, session_storage: SessionStorageInterface):
        self._sessions = session_storage

    async def resolve_token(self, token: Optional[str]) -> str:
        if not token:
            raise AuthError(INVALID_TOKEN)

        with translate_storage_errors():
            session = await self._sessions.get_session_by_token(token)

        if session is None:
            raise AuthError(INVALID_TOKEN)
        return session.user_id


class AuthGateway:
    """
    Orchestrates registration and login.

    Flow (sign-in):
    1. Look up the user by normalized email
    2. Verify the password hash
    3. Replace any existing session with a fresh random token
    """

    def __init__(
        self,
        user_storage: UserStorageInterface,
        session_storage: SessionStorageInterface,
        hasher: PasswordHasher,
        tokens: TokenGenerator,
    ):
        self._users = user_storage
        self._sessions = session_storage
        self._hasher = hasher
        self._tokens = tokens

    async def sign_up(self, name: str, email: str, password: str) -> User:
        """
        Register a new user. Does not create a session.

        Raises:
            BadRequestError: If the name is empty once markup is stripped
            ConflictError: If the email is already registered
        """
        clean_name = strip_markup(name)
        if not clean_name:
            raise BadRequestError(NAME_REQUIRED)
        clean_email = normalize_email(email)

        with translate_storage_errors():
            existing = await self._users.get_user_by_email(clean_email)
        if existing is not None:
            logger.info("signup_rejected", reason="email_taken")
            raise ConflictError(EMAIL_TAKEN)

        # Hashing runs in a worker thread, not on the event loop
        password_hash = await asyncio.to_thread(self._hasher.hash, password)

        user = User(
            name=clean_name,
            email=clean_email,
            password_hash=password_hash,
        )
        with translate_storage_errors(EMAIL_TAKEN):
            await self._users.add_user(user)

        logger.info("user_registered", user_id=user.id)
        return user

    async def sign_in(self, email: str, password: str) -> SignInResult:
        """
        Authenticate and open a new session.

        Raises:
            NotFoundError: If no user has this email
            AuthError: If the password does not match
        """
        with translate_storage_errors():
            user = await self._users.get_user_by_email(normalize_email(email))
        if user is None:
            logger.info("signin_failed", reason="unknown_email")
            raise NotFoundError(USER_NOT_FOUND)

        valid = await asyncio.to_thread(self._hasher.verify, password, user.password_hash)
        if not valid:
            logger.info("signin_failed", reason="wrong_password", user_id=user.id)
            raise AuthError(WRONG_PASSWORD)

        session = Session(user_id=user.id, token=self._tokens.new_token())
        with translate_storage_errors():
            try:
                await self._sessions.replace_session(session)
            except DuplicateError:
                # A concurrent sign-in for this user inserted between our
                # delete and insert; replacing again supersedes it
                logger.info("session_replace_retried", user_id=user.id)
                await self._sessions.replace_session(session)

        logger.info("session_created", user_id=user.id)
        return SignInResult(name=user.name, token=session.token)
