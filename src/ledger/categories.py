"""
Category Registry

User-owned income/expense categories.

Rules:
- (owner, name, type) is unique; the same name with the other type is fine
- Updates replace every mutable field and re-check uniqueness, excluding
  the category being updated
- Deleting a category unlinks (never deletes) the transactions that
  reference it
"""

from typing import Optional

from pydantic import ValidationError

from src.errors import BadRequestError, ConflictError, NotFoundError, translate_storage_errors
from src.logger import get_logger
from src.models.ledger import Category, TransactionType
from src.services.security import strip_markup, strip_optional
from src.services.storage import CategoryStorageInterface


CATEGORY_EXISTS = "Category with this name and type already exists!"
CATEGORY_NOT_FOUND = "Category not found!"
INVALID_CATEGORY_FIELDS = "Category name, icon or description is invalid!"

logger = get_logger(__name__)


class CategoryRegistry:
    """Create, list, update and delete a user's categories."""

    def __init__(self, category_storage: CategoryStorageInterface):
        self._storage = category_storage

    def _build(
        self,
        owner_id: str,
        name: str,
        type: TransactionType,
        icon: str,
        description: Optional[str],
        category_id: Optional[str] = None,
    ) -> Category:
        fields = dict(
            owner_id=owner_id,
            name=strip_markup(name),
            type=type,
            icon=strip_markup(icon),
            description=strip_optional(description) or None,
        )
        if category_id is not None:
            fields["id"] = category_id
        try:
            return Category(**fields)
        except ValidationError as e:
            # Sanitizing can leave a name or icon shorter than allowed
            raise BadRequestError(INVALID_CATEGORY_FIELDS) from e

    async def create(
        self,
        owner_id: str,
        name: str,
        type: TransactionType,
        icon: str,
        description: Optional[str] = None,
    ) -> Category:
        """
        Raises:
            BadRequestError: If a field is out of bounds once markup is stripped
            ConflictError: If the owner already has a category with this name and type
        """
        category = self._build(owner_id, name, type, icon, description)

        with translate_storage_errors():
            existing = await self._storage.find_category(
                owner_id, category.name, category.type.value
            )
        if existing is not None:
            raise ConflictError(CATEGORY_EXISTS)

        # The store's unique constraint catches the race the check above cannot
        with translate_storage_errors(CATEGORY_EXISTS):
            await self._storage.add_category(category)

        logger.info("category_created", owner_id=owner_id, category_id=category.id)
        return category

    async def list_categories(self, owner_id: str) -> list[Category]:
        with translate_storage_errors():
            return await self._storage.list_categories(owner_id)

    async def update(
        self,
        category_id: str,
        owner_id: str,
        name: str,
        type: TransactionType,
        icon: str,
        description: Optional[str] = None,
    ) -> Category:
        """
        Replace a category's name, type, icon and description.

        Raises:
            NotFoundError: If the owner has no category with this id
            ConflictError: If another of the owner's categories already has the new name and type
        """
        with translate_storage_errors():
            current = await self._storage.get_category(category_id, owner_id)
        if current is None:
            raise NotFoundError(CATEGORY_NOT_FOUND)

        category = self._build(owner_id, name, type, icon, description, category_id)

        with translate_storage_errors():
            clash = await self._storage.find_category(
                owner_id, category.name, category.type.value
            )
        if clash is not None and clash.id != category_id:
            raise ConflictError(CATEGORY_EXISTS)

        with translate_storage_errors(CATEGORY_EXISTS):
            updated = await self._storage.update_category(category)
        if not updated:
            raise NotFoundError(CATEGORY_NOT_FOUND)

        logger.info("category_updated", owner_id=owner_id, category_id=category_id)
        return category

    async def delete(self, category_id: str, owner_id: str) -> int:
        """
        Delete a category, unlinking every transaction that references it.

        Returns:
            How many transactions were unlinked

        Raises:
            NotFoundError: If the owner has no category with this id
        """
        with translate_storage_errors():
            unlinked = await self._storage.delete_category(category_id, owner_id)
        if unlinked is None:
            raise NotFoundError(CATEGORY_NOT_FOUND)

        logger.info(
            "category_deleted",
            owner_id=owner_id,
            category_id=category_id,
            unlinked_transactions=unlinked,
        )
        return unlinked
