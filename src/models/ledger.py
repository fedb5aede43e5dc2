"""
Core Data Models for the Ledger

These models define the schemas for every entity the ledger stores and
every view it returns. They are designed to:
1. Enforce type safety at runtime
2. Be serializable for storage and for the HTTP layer
3. Keep ownership explicit (every owned entity carries owner_id)

DESIGN DECISION: Field names are snake_case in Python and camelCase on
the wire (alias generator). Stored entities carry the owner id; the API
only ever returns the *View models, which do not. Password hashes never
leave the service layer.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel


CENTS = Decimal("0.01")

# Fits Numeric(12, 2)
MAX_AMOUNT = Decimal("1e10")

NO_CATEGORY_NAME = "no category"


def new_id() -> str:
    """System-generated identifier for any stored entity."""
    return str(uuid4())


def utcnow() -> datetime:
    """Current server time as naive UTC (what the stores round-trip)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def round_amount(amount: Decimal) -> Decimal:
    """Round to two fractional digits, halves away from zero."""
    return Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """
    Direction of money flow.

    Shared by categories and transactions: a transaction may only be
    linked to a category of the same type.
    """
    INCOME = "income"
    EXPENSE = "expense"


class LedgerModel(BaseModel):
    """Base for everything that crosses the HTTP boundary."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# STORED ENTITIES
# =============================================================================

class User(BaseModel):
    """A registered user. Email is stored lower-cased and trimmed."""

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1)
    email: str
    password_hash: str


class Session(BaseModel):
    """
    An active login.

    At most one per user: creating a session replaces the previous one.
    """

    user_id: str
    token: str
    created_at: datetime = Field(default_factory=utcnow)


class Category(LedgerModel):
    """A user-owned income or expense category."""

    id: str = Field(default_factory=new_id)
    owner_id: str
    name: str = Field(..., min_length=2, max_length=50)
    type: TransactionType
    icon: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=100)


class Transaction(LedgerModel):
    """
    A user-owned monetary event.

    If category_id is set, the category belongs to the same owner and
    has the same type. The type itself never changes after creation.
    """

    id: str = Field(default_factory=new_id)
    owner_id: str
    type: TransactionType
    description: str = Field(..., min_length=4)
    amount: Decimal = Field(..., gt=0, lt=MAX_AMOUNT, decimal_places=2)
    date: datetime = Field(default_factory=utcnow)
    category_id: Optional[str] = None


# =============================================================================
# VIEWS - what the API returns (never the owner id)
# =============================================================================

class CategoryView(LedgerModel):
    """Public shape of a category."""

    id: str
    name: str
    type: TransactionType
    icon: str
    description: Optional[str] = None

    @classmethod
    def from_entity(cls, category: Category) -> "CategoryView":
        return cls(**category.model_dump(exclude={"owner_id"}))


class TransactionView(LedgerModel):
    """
    Public shape of a transaction.

    category is the resolved category when the link resolves, else None.
    """

    id: str
    type: TransactionType
    description: str
    amount: Decimal
    date: datetime
    category_id: Optional[str] = None
    category: Optional[CategoryView] = None

    @classmethod
    def from_entity(
        cls,
        transaction: Transaction,
        category: Optional[Category] = None,
    ) -> "TransactionView":
        return cls(
            **transaction.model_dump(exclude={"owner_id"}),
            category=CategoryView.from_entity(category) if category else None,
        )

    @field_serializer("amount", when_used="json")
    def serialize_amount(self, amount: Decimal) -> float:
        return float(amount)


class SummaryGroup(LedgerModel):
    """
    One bucket of the per-category summary.

    The ungrouped bucket has category_id None and the fallback name.
    """

    category_id: Optional[str] = None
    total_amount: Decimal = Decimal("0.00")
    count: int = Field(default=0, ge=0)
    type: TransactionType
    category_name: str = NO_CATEGORY_NAME
    category_type: Optional[TransactionType] = None

    @field_serializer("total_amount", when_used="json")
    def serialize_total(self, total: Decimal) -> float:
        return float(total)


class SignInResult(LedgerModel):
    """What a successful sign-in hands back to the client."""

    name: str
    token: str
