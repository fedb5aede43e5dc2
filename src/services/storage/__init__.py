"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
The SQL backend is the default; the in-memory backend follows the same
interface and is used by the tests.
"""

from src.services.storage.interface import (
    CategoryStorageInterface,
    DuplicateError,
    SessionStorageInterface,
    StorageError,
    StorageUnavailableError,
    TransactionStorageInterface,
    UserStorageInterface,
)
from src.services.storage.memory import (
    MemoryCategoryStorage,
    MemoryClient,
    MemorySessionStorage,
    MemoryTransactionStorage,
    MemoryUserStorage,
)
from src.services.storage.sql import (
    SqlCategoryStorage,
    SqlClient,
    SqlSessionStorage,
    SqlTransactionStorage,
    SqlUserStorage,
)

__all__ = [
    # Interfaces
    "CategoryStorageInterface",
    "SessionStorageInterface",
    "TransactionStorageInterface",
    "UserStorageInterface",
    # Exceptions
    "DuplicateError",
    "StorageError",
    "StorageUnavailableError",
    # In-memory implementation
    "MemoryCategoryStorage",
    "MemoryClient",
    "MemorySessionStorage",
    "MemoryTransactionStorage",
    "MemoryUserStorage",
    # SQL implementation
    "SqlCategoryStorage",
    "SqlClient",
    "SqlSessionStorage",
    "SqlTransactionStorage",
    "SqlUserStorage",
]
