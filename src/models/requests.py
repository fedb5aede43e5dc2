"""
Request Bodies

Every HTTP payload is validated against one of these models before it
reaches business logic. A payload that does not fit is rejected with the
structured field-error list (422).

Free-text fields have their markup stripped BEFORE the length bounds are
checked, so the bounds hold for what is actually stored. Passwords are
taken exactly as sent.
"""

from decimal import Decimal
from typing import Any, Optional

from pydantic import EmailStr, Field, field_validator

from src.models.ledger import MAX_AMOUNT, LedgerModel, TransactionType
from src.services.security.sanitizer import strip_markup


def clean_text(value: Any) -> Any:
    """Markup-stripped, trimmed text; non-strings are left for the type check."""
    if isinstance(value, str):
        return strip_markup(value)
    return value


class SignInRequest(LedgerModel):
    """Login payload."""

    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator('email', mode='before')
    @classmethod
    def trim_email(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class SignUpRequest(SignInRequest):
    """Registration payload."""

    name: str = Field(..., min_length=1)
    password: str = Field(..., min_length=3)

    @field_validator('name', mode='before')
    @classmethod
    def clean_name(cls, v: Any) -> Any:
        return clean_text(v)


class CategoryRequest(LedgerModel):
    """Create/replace payload for a category."""

    name: str = Field(..., min_length=2, max_length=50)
    type: TransactionType
    icon: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=100)

    @field_validator('name', 'icon', 'description', mode='before')
    @classmethod
    def clean_fields(cls, v: Any) -> Any:
        return clean_text(v)


class TransactionRequest(LedgerModel):
    """
    Create/update payload for a transaction.

    The type is not part of the body: it comes from the path on create
    and is immutable afterwards.
    """

    description: str = Field(..., min_length=4)
    amount: Decimal = Field(
        ...,
        ge=Decimal("0.01"),
        lt=MAX_AMOUNT,
        allow_inf_nan=False,
    )
    category_id: Optional[str] = None

    @field_validator('description', mode='before')
    @classmethod
    def clean_description(cls, v: Any) -> Any:
        return clean_text(v)

    @field_validator('category_id')
    @classmethod
    def empty_means_unlinked(cls, v: Optional[str]) -> Optional[str]:
        """An empty categoryId is the same as leaving it out."""
        if v is not None:
            v = v.strip()
        return v or None
