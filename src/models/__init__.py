"""
Data Models Package

This package contains all Pydantic models used by the ledger.
All data flowing through the system must conform to these schemas.
"""

from src.models.ledger import (
    NO_CATEGORY_NAME,
    Category,
    CategoryView,
    Session,
    SignInResult,
    SummaryGroup,
    Transaction,
    TransactionType,
    TransactionView,
    User,
    new_id,
    round_amount,
    utcnow,
)
from src.models.requests import (
    CategoryRequest,
    SignInRequest,
    SignUpRequest,
    TransactionRequest,
)

__all__ = [
    # Entities
    "Category",
    "CategoryView",
    "Session",
    "Transaction",
    "TransactionType",
    "User",
    # Views
    "NO_CATEGORY_NAME",
    "SignInResult",
    "SummaryGroup",
    "TransactionView",
    # Requests
    "CategoryRequest",
    "SignInRequest",
    "SignUpRequest",
    "TransactionRequest",
    # Helpers
    "new_id",
    "round_amount",
    "utcnow",
]
