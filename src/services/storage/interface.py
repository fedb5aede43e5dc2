"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the SQL database for another store later
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

Every category and transaction operation takes the owner id, and the
implementations filter on it. Uniqueness rules (email, one session per
user, (owner, name, type) per category) are enforced HERE: a violating
write raises DuplicateError even when the service already checked,
because two concurrent requests can both pass the service check.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from src.models.ledger import Category, Session, Transaction, User


class UserStorageInterface(ABC):
    """User records keyed by unique email."""

    @abstractmethod
    async def add_user(self, user: User) -> User:
        """
        Insert a new user.

        Raises:
            DuplicateError: If the email is already registered
        """
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Look up a user by normalized email."""
        pass


class SessionStorageInterface(ABC):
    """Bearer token → user id, one row per user."""

    @abstractmethod
    async def replace_session(self, session: Session) -> Session:
        """
        Store a session, removing any previous session of the same user.

        Both steps happen together: afterwards exactly one session row
        exists for the user and it carries the new token.
        """
        pass

    @abstractmethod
    async def get_session_by_token(self, token: str) -> Optional[Session]:
        pass


class CategoryStorageInterface(ABC):
    """User-owned categories."""

    @abstractmethod
    async def add_category(self, category: Category) -> Category:
        """
        Insert a category.

        Raises:
            DuplicateError: If (owner, name, type) already exists
        """
        pass

    @abstractmethod
    async def get_category(self, category_id: str, owner_id: str) -> Optional[Category]:
        """Fetch a category only if it belongs to owner_id."""
        pass

    @abstractmethod
    async def find_category(
        self,
        owner_id: str,
        name: str,
        type: str,
    ) -> Optional[Category]:
        """Find the owner's category with this exact name and type."""
        pass

    @abstractmethod
    async def list_categories(self, owner_id: str) -> list[Category]:
        """All of the owner's categories, in the store's natural order."""
        pass

    @abstractmethod
    async def update_category(self, category: Category) -> bool:
        """
        Replace the mutable fields of an existing category.

        Returns:
            False if no category with that id exists for that owner

        Raises:
            DuplicateError: If the new (name, type) collides with another category
        """
        pass

    @abstractmethod
    async def delete_category(self, category_id: str, owner_id: str) -> Optional[int]:
        """
        Delete a category and unlink every transaction that references it.

        Transactions are unlinked (category_id cleared), never deleted.
        Implementations that support it run both steps in one atomic
        unit; otherwise the unlink runs first and is safe to repeat.

        Returns:
            Number of transactions unlinked, or None if the category
            does not exist for that owner
        """
        pass


class TransactionStorageInterface(ABC):
    """User-owned transactions."""

    @abstractmethod
    async def add_transaction(self, transaction: Transaction) -> Transaction:
        pass

    @abstractmethod
    async def get_transaction(
        self,
        transaction_id: str,
        owner_id: str,
    ) -> Optional[Transaction]:
        """Fetch a transaction only if it belongs to owner_id."""
        pass

    @abstractmethod
    async def list_transactions(self, owner_id: str) -> list[Transaction]:
        """All of the owner's transactions, newest first."""
        pass

    @abstractmethod
    async def update_transaction(
        self,
        transaction_id: str,
        owner_id: str,
        description: str,
        amount: Decimal,
        category_id: Optional[str],
    ) -> Optional[Transaction]:
        """
        Overwrite description, amount and category link.

        Returns:
            The updated transaction, or None if it does not exist for that owner
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: str, owner_id: str) -> bool:
        """Returns True if a transaction was deleted."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class StorageUnavailableError(StorageError):
    """Could not reach the storage backend (or it did not answer in time)."""
    pass
