"""
Transaction Ledger

User-owned monetary events and their per-category summary.

A transaction's category link moves between two states:

    unlinked  <->  linked to category C

Linking succeeds only if C exists, belongs to the same user, and has
the same type as the transaction. Unlinking happens on an update
without a categoryId, or when C is deleted.

Amounts are rounded half-up to cents before storage. The transaction
date is the server time at creation. The type is fixed at creation.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

from src.errors import BadRequestError, NotFoundError, translate_storage_errors
from src.logger import get_logger
from src.models.ledger import (
    MAX_AMOUNT,
    SummaryGroup,
    Transaction,
    TransactionType,
    TransactionView,
    round_amount,
)
from src.services.security import strip_markup
from src.services.storage import CategoryStorageInterface, TransactionStorageInterface


INVALID_CATEGORY = "Invalid category!"
TYPE_MISMATCH = "Category type does not match transaction type!"
INVALID_AMOUNT = "Amount must be between 0.01 and 9999999999.99!"
INVALID_DESCRIPTION = "Description must have at least 4 characters!"
TRANSACTION_NOT_FOUND = "Transaction not found!"

logger = get_logger(__name__)


class TransactionLedger:
    """Record, query, change and summarize a user's transactions."""

    def __init__(
        self,
        transaction_storage: TransactionStorageInterface,
        category_storage: CategoryStorageInterface,
    ):
        self._storage = transaction_storage
        self._categories = category_storage

    async def _resolve_category(
        self,
        owner_id: str,
        category_id: Optional[str],
        transaction_type: TransactionType,
    ) -> Optional[str]:
        """
        Check a requested category link.

        Returns:
            The canonical category id, or None to leave the transaction unlinked

        Raises:
            BadRequestError: If the category is malformed, missing,
                someone else's, or of the other type
        """
        if not category_id:
            return None

        try:
            canonical_id = str(UUID(category_id))
        except ValueError:
            raise BadRequestError(INVALID_CATEGORY)

        with translate_storage_errors():
            category = await self._categories.get_category(canonical_id, owner_id)
        if category is None:
            raise BadRequestError(INVALID_CATEGORY)
        if category.type != transaction_type:
            raise BadRequestError(TYPE_MISMATCH)

        return category.id

    @staticmethod
    def _checked_amount(amount: Decimal) -> Decimal:
        try:
            rounded = round_amount(amount)
        except InvalidOperation as e:
            # Too many digits to quantize to cents
            raise BadRequestError(INVALID_AMOUNT) from e
        if not 0 < rounded < MAX_AMOUNT:
            raise BadRequestError(INVALID_AMOUNT)
        return rounded

    @staticmethod
    def _checked_description(description: str) -> str:
        cleaned = strip_markup(description)
        if len(cleaned) < 4:
            raise BadRequestError(INVALID_DESCRIPTION)
        return cleaned

    async def create(
        self,
        owner_id: str,
        type: TransactionType,
        description: str,
        amount: Decimal,
        category_id: Optional[str] = None,
    ) -> Transaction:
        """
        Raises:
            BadRequestError: If the amount or description is out of bounds,
                or the category link is invalid
        """
        transaction = Transaction(
            owner_id=owner_id,
            type=type,
            description=self._checked_description(description),
            amount=self._checked_amount(amount),
            category_id=await self._resolve_category(owner_id, category_id, type),
        )

        with translate_storage_errors():
            await self._storage.add_transaction(transaction)

        logger.info(
            "transaction_created",
            owner_id=owner_id,
            transaction_id=transaction.id,
            type=transaction.type.value,
        )
        return transaction

    async def list_transactions(self, owner_id: str) -> list[TransactionView]:
        """All of the owner's transactions, newest first, with categories embedded."""
        with translate_storage_errors():
            transactions = await self._storage.list_transactions(owner_id)
            categories = await self._categories.list_categories(owner_id)

        by_id = {category.id: category for category in categories}
        views = [
            TransactionView.from_entity(transaction, by_id.get(transaction.category_id))
            for transaction in transactions
        ]
        views.sort(key=lambda view: view.date, reverse=True)
        return views

    async def get(self, transaction_id: str, owner_id: str) -> Transaction:
        with translate_storage_errors():
            transaction = await self._storage.get_transaction(transaction_id, owner_id)
        if transaction is None:
            raise NotFoundError(TRANSACTION_NOT_FOUND)
        return transaction

    async def update(
        self,
        transaction_id: str,
        owner_id: str,
        description: str,
        amount: Decimal,
        category_id: Optional[str] = None,
    ) -> Transaction:
        """
        Overwrite description, amount and category link.

        Leaving category_id out clears the link. The category is checked
        against the stored transaction's type.

        Raises:
            NotFoundError: If the owner has no transaction with this id
            BadRequestError: If the amount or description is out of bounds,
                or the category link is invalid
        """
        current = await self.get(transaction_id, owner_id)

        checked_description = self._checked_description(description)
        checked_amount = self._checked_amount(amount)
        linked_id = await self._resolve_category(owner_id, category_id, current.type)

        with translate_storage_errors():
            updated = await self._storage.update_transaction(
                transaction_id,
                owner_id,
                description=checked_description,
                amount=checked_amount,
                category_id=linked_id,
            )
        if updated is None:
            raise NotFoundError(TRANSACTION_NOT_FOUND)

        logger.info("transaction_updated", owner_id=owner_id, transaction_id=transaction_id)
        return updated

    async def delete(self, transaction_id: str, owner_id: str) -> None:
        with translate_storage_errors():
            deleted = await self._storage.delete_transaction(transaction_id, owner_id)
        if not deleted:
            raise NotFoundError(TRANSACTION_NOT_FOUND)
        logger.info("transaction_deleted", owner_id=owner_id, transaction_id=transaction_id)

    async def summary(self, owner_id: str) -> list[SummaryGroup]:
        """
        Totals per category, largest total first.

        Unlinked transactions share one group (category_id None). A
        group's type comes from its first member; members of a category
        group always share the category's type.
        """
        with translate_storage_errors():
            transactions = await self._storage.list_transactions(owner_id)
            categories = await self._categories.list_categories(owner_id)

        groups: dict[Optional[str], SummaryGroup] = {}
        for transaction in transactions:
            group = groups.get(transaction.category_id)
            if group is None:
                group = SummaryGroup(
                    category_id=transaction.category_id,
                    type=transaction.type,
                )
                groups[transaction.category_id] = group
            group.total_amount += transaction.amount
            group.count += 1

        by_id = {category.id: category for category in categories}
        for group in groups.values():
            category = by_id.get(group.category_id)
            if category is not None:
                group.category_name = category.name
                group.category_type = category.type

        return sorted(groups.values(), key=lambda g: g.total_amount, reverse=True)
