"""Services package."""

from src.services.security import (
    PasswordHasher,
    TokenGenerator,
    strip_markup,
    strip_optional,
)
from src.services.storage import (
    CategoryStorageInterface,
    DuplicateError,
    MemoryClient,
    SessionStorageInterface,
    SqlClient,
    StorageError,
    StorageUnavailableError,
    TransactionStorageInterface,
    UserStorageInterface,
)

__all__ = [
    # Security services
    "PasswordHasher",
    "TokenGenerator",
    "strip_markup",
    "strip_optional",
    # Storage services
    "CategoryStorageInterface",
    "DuplicateError",
    "MemoryClient",
    "SessionStorageInterface",
    "SqlClient",
    "StorageError",
    "StorageUnavailableError",
    "TransactionStorageInterface",
    "UserStorageInterface",
]
