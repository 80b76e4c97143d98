"""Pydantic contracts shared across backend and API."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


T = TypeVar("T")


class ExpenseCategory(str, Enum):
    """Closed set of expense categories.

    Declaration order is significant: reports list categories with equal
    totals in this order.
    """

    FOOD = "food"
    TRANSPORTATION = "transportation"
    ENTERTAINMENT = "entertainment"
    UTILITIES = "utilities"
    HEALTHCARE = "healthcare"
    SHOPPING = "shopping"
    EDUCATION = "education"
    OTHER = "other"


class Expense(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: UUID
    owner_id: UUID
    title: str
    amount: Decimal = Field(ge=0)
    occurred_on: date
    category: ExpenseCategory
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ExpenseCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1)
    amount: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    occurred_on: date
    category: ExpenseCategory
    notes: str | None = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("title must not be blank")
        return stripped


class ExpenseUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=1)
    amount: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    occurred_on: date | None = None
    category: ExpenseCategory | None = None
    notes: str | None = None

    @field_validator("title", "amount", "occurred_on", "category", mode="before")
    @classmethod
    def reject_null(cls, value: object) -> object:
        # Omit a field to keep it; only notes can be cleared.
        if value is None:
            raise ValueError("field cannot be null")
        return value

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str | None) -> str | None:
        if value is None:
            return value
        stripped = value.strip()
        if not stripped:
            raise ValueError("title must not be blank")
        return stripped

    def changes(self) -> dict[str, object]:
        """Return only the fields explicitly sent by the caller."""
        return self.model_dump(exclude_unset=True)


class ExpenseFilters(BaseModel):
    model_config = ConfigDict(extra="forbid")

    start_date: date | None = None
    end_date: date | None = None
    category: ExpenseCategory | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


class CategorySummary(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    category: ExpenseCategory
    total: Decimal
    count: int = Field(ge=0)


class CategoryReport(BaseModel):
    """Per-category breakdown of one owner's expenses over an inclusive period."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    start_date: str
    end_date: str
    total_amount: Decimal
    categories: tuple[CategorySummary, ...]


class PaginationResult(BaseModel, Generic[T]):
    model_config = ConfigDict(extra="forbid")

    data: list[T]
    total: int
    page: int
    limit: int


class PaginationMeta(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


class PaginatedResponse(BaseModel, Generic[T]):
    model_config = ConfigDict(extra="forbid")

    data: list[T]
    meta: PaginationMeta
