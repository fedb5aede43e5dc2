"""The ledger itself: categories and transactions, scoped to their owner."""

from src.ledger.categories import CategoryRegistry
from src.ledger.transactions import TransactionLedger

__all__ = [
    "CategoryRegistry",
    "TransactionLedger",
]
