"""
In-Memory Storage Implementation

Used by the test suite and for throwaway local runs
(DATABASE_BACKEND=memory). Follows the same abstract interface and the
same uniqueness rules as the SQL backend.

Every operation holds one asyncio.Lock for its whole body, so each call
is atomic with respect to other coroutines. Entities are copied on the
way in and out; callers never share objects with the store.
"""

import asyncio
from decimal import Decimal
from typing import Optional

from src.models.ledger import Category, Session, Transaction, User
from src.services.storage.interface import (
    CategoryStorageInterface,
    DuplicateError,
    SessionStorageInterface,
    TransactionStorageInterface,
    UserStorageInterface,
)


class MemoryClient:
    """Holds the tables. Mirrors the open/close lifecycle of the SQL client."""

    def __init__(self):
        self.users: dict[str, User] = {}
        self.sessions: dict[str, Session] = {}  # keyed by user_id
        self.categories: dict[str, Category] = {}
        self.transactions: dict[str, Transaction] = {}
        self.lock = asyncio.Lock()

    async def connect(self) -> None:
        pass

    async def close(self) -> None:
        self.users.clear()
        self.sessions.clear()
        self.categories.clear()
        self.transactions.clear()


class MemoryUserStorage(UserStorageInterface):

    def __init__(self, client: MemoryClient):
        self._client = client

    async def add_user(self, user: User) -> User:
        async with self._client.lock:
            if any(u.email == user.email for u in self._client.users.values()):
                raise DuplicateError(f"Email already registered: {user.email}")
            self._client.users[user.id] = user.model_copy()
            return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        async with self._client.lock:
            for user in self._client.users.values():
                if user.email == email:
                    return user.model_copy()
            return None


class MemorySessionStorage(SessionStorageInterface):

    def __init__(self, client: MemoryClient):
        self._client = client

    async def replace_session(self, session: Session) -> Session:
        async with self._client.lock:
            if any(
                s.token == session.token and s.user_id != session.user_id
                for s in self._client.sessions.values()
            ):
                raise DuplicateError("Session token collision")
            self._client.sessions[session.user_id] = session.model_copy()
            return session

    async def get_session_by_token(self, token: str) -> Optional[Session]:
        async with self._client.lock:
            for session in self._client.sessions.values():
                if session.token == token:
                    return session.model_copy()
            return None


class MemoryCategoryStorage(CategoryStorageInterface):

    def __init__(self, client: MemoryClient):
        self._client = client

    def _collides(self, category: Category) -> bool:
        return any(
            c.owner_id == category.owner_id
            and c.name == category.name
            and c.type == category.type
            and c.id != category.id
            for c in self._client.categories.values()
        )

    async def add_category(self, category: Category) -> Category:
        async with self._client.lock:
            if self._collides(category):
                raise DuplicateError(f"Category already exists: {category.name}")
            self._client.categories[category.id] = category.model_copy()
            return category

    async def get_category(self, category_id: str, owner_id: str) -> Optional[Category]:
        async with self._client.lock:
            category = self._client.categories.get(category_id)
            if category is None or category.owner_id != owner_id:
                return None
            return category.model_copy()

    async def find_category(
        self,
        owner_id: str,
        name: str,
        type: str,
    ) -> Optional[Category]:
        async with self._client.lock:
            for category in self._client.categories.values():
                if (
                    category.owner_id == owner_id
                    and category.name == name
                    and category.type == type
                ):
                    return category.model_copy()
            return None

    async def list_categories(self, owner_id: str) -> list[Category]:
        async with self._client.lock:
            return [
                c.model_copy()
                for c in self._client.categories.values()
                if c.owner_id == owner_id
            ]

    async def update_category(self, category: Category) -> bool:
        async with self._client.lock:
            existing = self._client.categories.get(category.id)
            if existing is None or existing.owner_id != category.owner_id:
                return False
            if self._collides(category):
                raise DuplicateError(f"Category already exists: {category.name}")
            self._client.categories[category.id] = category.model_copy()
            return True

    async def delete_category(self, category_id: str, owner_id: str) -> Optional[int]:
        async with self._client.lock:
            category = self._client.categories.get(category_id)
            if category is None or category.owner_id != owner_id:
                return None

            # Unlink first; repeating this after a partial failure is harmless
            unlinked = 0
            for transaction in self._client.transactions.values():
                if transaction.category_id == category_id:
                    transaction.category_id = None
                    unlinked += 1

            del self._client.categories[category_id]
            return unlinked


class MemoryTransactionStorage(TransactionStorageInterface):

    def __init__(self, client: MemoryClient):
        self._client = client

    async def add_transaction(self, transaction: Transaction) -> Transaction:
        async with self._client.lock:
            self._client.transactions[transaction.id] = transaction.model_copy()
            return transaction

    async def get_transaction(
        self,
        transaction_id: str,
        owner_id: str,
    ) -> Optional[Transaction]:
        async with self._client.lock:
            transaction = self._client.transactions.get(transaction_id)
            if transaction is None or transaction.owner_id != owner_id:
                return None
            return transaction.model_copy()

    async def list_transactions(self, owner_id: str) -> list[Transaction]:
        async with self._client.lock:
            transactions = [
                t.model_copy()
                for t in self._client.transactions.values()
                if t.owner_id == owner_id
            ]
        transactions.sort(key=lambda t: t.date, reverse=True)
        return transactions

    async def update_transaction(
        self,
        transaction_id: str,
        owner_id: str,
        description: str,
        amount: Decimal,
        category_id: Optional[str],
    ) -> Optional[Transaction]:
        async with self._client.lock:
            transaction = self._client.transactions.get(transaction_id)
            if transaction is None or transaction.owner_id != owner_id:
                return None
            transaction.description = description
            transaction.amount = amount
            transaction.category_id = category_id
            return transaction.model_copy()

    async def delete_transaction(self, transaction_id: str, owner_id: str) -> bool:
        async with self._client.lock:
            transaction = self._client.transactions.get(transaction_id)
            if transaction is None or transaction.owner_id != owner_id:
                return False
            del self._client.transactions[transaction_id]
            return True
