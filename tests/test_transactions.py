"""Tests for the transaction ledger and its summary (in-memory store)."""

import pytest
from datetime import datetime
from decimal import Decimal

from src.errors import BadRequestError, NotFoundError
from src.ledger.transactions import (
    INVALID_AMOUNT,
    INVALID_CATEGORY,
    INVALID_DESCRIPTION,
    TRANSACTION_NOT_FOUND,
    TYPE_MISMATCH,
)
from src.models import NO_CATEGORY_NAME, Transaction, TransactionType


OWNER = "owner-1"
OTHER_OWNER = "owner-2"
EXPENSE = TransactionType.EXPENSE
INCOME = TransactionType.INCOME


class TestCreateTransaction:
    """Tests for recording transactions."""

    async def test_amount_is_rounded(self, ledger):
        transaction = await ledger.create(OWNER, INCOME, "Freelance job", Decimal("123.456789"))
        assert transaction.amount == Decimal("123.46")
        assert transaction.category_id is None
        assert transaction.type == INCOME

    async def test_amount_rounding_to_zero_is_rejected(self, ledger):
        with pytest.raises(BadRequestError):
            await ledger.create(OWNER, INCOME, "Rounding", Decimal("0.004"))

    async def test_links_matching_category(self, registry, ledger):
        category = await registry.create(OWNER, "Salary", INCOME, "💼")
        transaction = await ledger.create(OWNER, INCOME, "January", Decimal("100"), category.id)
        assert transaction.category_id == category.id

    async def test_category_type_mismatch(self, registry, ledger):
        category = await registry.create(OWNER, "Food", EXPENSE, "🍔")
        with pytest.raises(BadRequestError) as exc_info:
            await ledger.create(OWNER, INCOME, "Refund", Decimal("5"), category.id)
        assert exc_info.value.message == TYPE_MISMATCH
        assert await ledger.list_transactions(OWNER) == []

    async def test_other_owners_category(self, registry, ledger):
        category = await registry.create(OTHER_OWNER, "Food", EXPENSE, "🍔")
        with pytest.raises(BadRequestError) as exc_info:
            await ledger.create(OWNER, EXPENSE, "Lunch out", Decimal("5"), category.id)
        assert exc_info.value.message == INVALID_CATEGORY

    async def test_malformed_category_id(self, ledger):
        with pytest.raises(BadRequestError) as exc_info:
            await ledger.create(OWNER, EXPENSE, "Lunch out", Decimal("5"), "not-an-id")
        assert exc_info.value.message == INVALID_CATEGORY

    async def test_amount_too_large(self, ledger):
        """Test that amounts beyond the stored precision are rejected."""
        for amount in ("1e30", "1e10", "10000000000.001"):
            with pytest.raises(BadRequestError) as exc_info:
                await ledger.create(OWNER, INCOME, "Big salary", Decimal(amount))
            assert exc_info.value.message == INVALID_AMOUNT
        assert await ledger.list_transactions(OWNER) == []

    async def test_description_too_short_once_sanitized(self, ledger):
        with pytest.raises(BadRequestError) as exc_info:
            await ledger.create(OWNER, EXPENSE, "<i></i>abc", Decimal("5"))
        assert exc_info.value.message == INVALID_DESCRIPTION
        assert await ledger.list_transactions(OWNER) == []

    async def test_description_is_sanitized(self, ledger):
        transaction = await ledger.create(
            OWNER, EXPENSE, "<script>x()</script>Groceries", Decimal("5")
        )
        assert transaction.description == "Groceries"


class TestQueryTransactions:
    """Tests for listing and fetching."""

    async def test_list_newest_first_with_category(self, registry, ledger, transaction_storage):
        category = await registry.create(OWNER, "Food", EXPENSE, "🍔")
        for day, category_id in ((1, category.id), (3, None), (2, category.id)):
            await transaction_storage.add_transaction(
                Transaction(
                    owner_id=OWNER,
                    type=EXPENSE,
                    description=f"Day {day}",
                    amount=Decimal("1.00"),
                    date=datetime(2024, 5, day),
                    category_id=category_id,
                )
            )

        views = await ledger.list_transactions(OWNER)
        assert [v.description for v in views] == ["Day 3", "Day 2", "Day 1"]
        assert views[0].category is None
        assert views[1].category.name == "Food"

    async def test_list_is_owner_scoped(self, ledger):
        await ledger.create(OWNER, EXPENSE, "Lunch out", Decimal("5"))
        assert await ledger.list_transactions(OTHER_OWNER) == []

    async def test_get_other_owners_transaction(self, ledger):
        transaction = await ledger.create(OWNER, EXPENSE, "Lunch out", Decimal("5"))
        with pytest.raises(NotFoundError) as exc_info:
            await ledger.get(transaction.id, OTHER_OWNER)
        assert exc_info.value.message == TRANSACTION_NOT_FOUND


class TestChangeTransaction:
    """Tests for update and delete."""

    async def test_update_overwrites_and_unlinks(self, registry, ledger):
        category = await registry.create(OWNER, "Food", EXPENSE, "🍔")
        transaction = await ledger.create(OWNER, EXPENSE, "Lunch out", Decimal("5"), category.id)

        updated = await ledger.update(transaction.id, OWNER, "Late lunch", Decimal("7.777"))
        assert updated.description == "Late lunch"
        assert updated.amount == Decimal("7.78")
        assert updated.category_id is None
        assert updated.type == EXPENSE
        assert updated.date == transaction.date

    async def test_update_rechecks_description_and_amount(self, ledger):
        transaction = await ledger.create(OWNER, EXPENSE, "Lunch out", Decimal("5"))
        with pytest.raises(BadRequestError):
            await ledger.update(transaction.id, OWNER, "<b>ab</b>", Decimal("5"))
        with pytest.raises(BadRequestError):
            await ledger.update(transaction.id, OWNER, "Lunch out", Decimal("1e30"))

        stored = await ledger.get(transaction.id, OWNER)
        assert stored.description == "Lunch out"
        assert stored.amount == Decimal("5.00")

    async def test_update_checks_stored_type(self, registry, ledger):
        income = await registry.create(OWNER, "Salary", INCOME, "💼")
        transaction = await ledger.create(OWNER, EXPENSE, "Lunch out", Decimal("5"))
        with pytest.raises(BadRequestError) as exc_info:
            await ledger.update(transaction.id, OWNER, "Lunch out", Decimal("5"), income.id)
        assert exc_info.value.message == TYPE_MISMATCH

    async def test_update_other_owners_transaction(self, ledger):
        transaction = await ledger.create(OWNER, EXPENSE, "Lunch out", Decimal("5"))
        with pytest.raises(NotFoundError):
            await ledger.update(transaction.id, OTHER_OWNER, "Mine now", Decimal("5"))

    async def test_delete(self, ledger):
        transaction = await ledger.create(OWNER, EXPENSE, "Lunch out", Decimal("5"))
        with pytest.raises(NotFoundError):
            await ledger.delete(transaction.id, OTHER_OWNER)
        await ledger.delete(transaction.id, OWNER)
        with pytest.raises(NotFoundError):
            await ledger.delete(transaction.id, OWNER)


class TestSummary:
    """Tests for the per-category summary."""

    async def test_groups_sorted_by_total(self, registry, ledger):
        food = await registry.create(OWNER, "Food", EXPENSE, "🍔")
        salary = await registry.create(OWNER, "Salary", INCOME, "💼")
        await ledger.create(OWNER, EXPENSE, "Lunch out", Decimal("10"), food.id)
        await ledger.create(OWNER, EXPENSE, "Dinner out", Decimal("15.50"), food.id)
        await ledger.create(OWNER, INCOME, "January", Decimal("1000"), salary.id)
        await ledger.create(OWNER, EXPENSE, "Bus ticket", Decimal("2"))
        await ledger.create(OTHER_OWNER, EXPENSE, "Not mine", Decimal("5000"))

        groups = await ledger.summary(OWNER)

        assert [g.category_id for g in groups] == [salary.id, food.id, None]
        assert groups[0].total_amount == Decimal("1000")
        assert groups[0].category_name == "Salary"
        assert groups[0].category_type == INCOME
        assert groups[1].total_amount == Decimal("25.50")
        assert groups[1].count == 2
        assert groups[2].category_name == NO_CATEGORY_NAME
        assert groups[2].category_type is None
        assert groups[2].type == EXPENSE

    async def test_counts_add_up(self, ledger):
        for amount in ("1", "2", "3"):
            await ledger.create(OWNER, EXPENSE, "Coffee cup", Decimal(amount))
        groups = await ledger.summary(OWNER)
        assert sum(g.count for g in groups) == 3
        assert sum(g.total_amount for g in groups) == Decimal("6.00")

    async def test_empty_summary(self, ledger):
        assert await ledger.summary(OWNER) == []
