"""Expenses repository adapters."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Protocol
from uuid import UUID, uuid4

from backend.db.supabase_client import SupabaseClient
from shared.models import Expense, ExpenseCreateRequest, ExpenseFilters
from shared.pagination import calculate_skip


_EXPENSE_COLUMNS = "id,owner_id,title,amount,occurred_on,category,notes,created_at,updated_at"


class ExpensesRepository(Protocol):
    def create_expense(self, owner_id: UUID, request: ExpenseCreateRequest) -> Expense:
        """Persist a new expense for one owner."""

    def get_expense(self, expense_id: UUID) -> Expense | None:
        """Return one expense regardless of owner, or None."""

    def list_expenses(self, owner_id: UUID, filters: ExpenseFilters) -> tuple[list[Expense], int]:
        """Return one page of expenses (newest first) and the total match count."""

    def list_expenses_in_range(self, owner_id: UUID, start_date: date, end_date: date) -> list[Expense]:
        """Return every expense of one owner within an inclusive date range."""

    def update_expense(self, expense_id: UUID, changes: dict[str, object]) -> Expense:
        """Apply field changes to one expense."""

    def delete_expense(self, expense_id: UUID) -> None:
        """Delete one expense."""


def _matches_filters(expense: Expense, filters: ExpenseFilters) -> bool:
    if filters.start_date is not None and expense.occurred_on < filters.start_date:
        return False
    if filters.end_date is not None and expense.occurred_on > filters.end_date:
        return False
    if filters.category is not None and expense.category != filters.category:
        return False
    return True


class InMemoryExpensesRepository:
    """In-memory expenses repository used by tests/dev."""

    def __init__(self, seed: list[Expense] | None = None) -> None:
        self._expenses: list[Expense] = list(seed or [])

    def create_expense(self, owner_id: UUID, request: ExpenseCreateRequest) -> Expense:
        now = datetime.now(timezone.utc)
        expense = Expense(
            id=uuid4(),
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
            **request.model_dump(),
        )
        self._expenses.append(expense)
        return expense

    def get_expense(self, expense_id: UUID) -> Expense | None:
        return next((expense for expense in self._expenses if expense.id == expense_id), None)

    def list_expenses(self, owner_id: UUID, filters: ExpenseFilters) -> tuple[list[Expense], int]:
        rows = [
            expense
            for expense in self._expenses
            if expense.owner_id == owner_id and _matches_filters(expense, filters)
        ]
        rows.sort(key=lambda expense: expense.occurred_on, reverse=True)
        offset = calculate_skip(filters.page, filters.limit)
        return rows[offset : offset + filters.limit], len(rows)

    def list_expenses_in_range(self, owner_id: UUID, start_date: date, end_date: date) -> list[Expense]:
        return [
            expense
            for expense in self._expenses
            if expense.owner_id == owner_id and start_date <= expense.occurred_on <= end_date
        ]

    def update_expense(self, expense_id: UUID, changes: dict[str, object]) -> Expense:
        for index, expense in enumerate(self._expenses):
            if expense.id != expense_id:
                continue
            updated = Expense.model_validate(
                {**expense.model_dump(), **changes, "updated_at": datetime.now(timezone.utc)}
            )
            self._expenses[index] = updated
            return updated
        raise ValueError("Expense not found")

    def delete_expense(self, expense_id: UUID) -> None:
        kept = [expense for expense in self._expenses if expense.id != expense_id]
        if len(kept) == len(self._expenses):
            raise ValueError("Expense not found")
        self._expenses = kept


class SupabaseExpensesRepository:
    """Supabase repository reading and writing `public.expenses`."""

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    @staticmethod
    def _parse_row(row: dict[str, Any]) -> Expense:
        return Expense(
            id=row.get("id"),
            owner_id=row.get("owner_id"),
            title=str(row.get("title") or ""),
            amount=Decimal(str(row.get("amount"))),
            occurred_on=date.fromisoformat(str(row.get("occurred_on"))[:10]),
            category=row.get("category"),
            notes=row.get("notes"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    @staticmethod
    def _serialize(values: dict[str, object]) -> dict[str, object]:
        serialized: dict[str, object] = {}
        for field_name, value in values.items():
            if isinstance(value, (Decimal, UUID)):
                serialized[field_name] = str(value)
            elif isinstance(value, (date, datetime)):
                serialized[field_name] = value.isoformat()
            elif isinstance(value, Enum):
                serialized[field_name] = value.value
            else:
                serialized[field_name] = value
        return serialized

    def create_expense(self, owner_id: UUID, request: ExpenseCreateRequest) -> Expense:
        rows = self._client.request_rows(
            table="expenses",
            method="POST",
            query={"select": _EXPENSE_COLUMNS},
            body=self._serialize({**request.model_dump(), "owner_id": owner_id}),
        )
        if not rows:
            raise RuntimeError("Supabase did not return created expense")
        return self._parse_row(rows[0])

    def get_expense(self, expense_id: UUID) -> Expense | None:
        rows, _ = self._client.get_rows(
            table="expenses",
            query={"id": f"eq.{expense_id}", "select": _EXPENSE_COLUMNS, "limit": 1},
            with_count=False,
        )
        return self._parse_row(rows[0]) if rows else None

    def list_expenses(self, owner_id: UUID, filters: ExpenseFilters) -> tuple[list[Expense], int]:
        query: list[tuple[str, str | int]] = [("owner_id", f"eq.{owner_id}")]
        if filters.start_date is not None:
            query.append(("occurred_on", f"gte.{filters.start_date.isoformat()}"))
        if filters.end_date is not None:
            query.append(("occurred_on", f"lte.{filters.end_date.isoformat()}"))
        if filters.category is not None:
            query.append(("category", f"eq.{filters.category.value}"))
        query.extend(
            [
                ("select", _EXPENSE_COLUMNS),
                ("order", "occurred_on.desc"),
                ("limit", filters.limit),
                ("offset", calculate_skip(filters.page, filters.limit)),
            ]
        )
        rows, total = self._client.get_rows(table="expenses", query=query, with_count=True)
        items = [self._parse_row(row) for row in rows]
        return items, total if total is not None else len(items)

    def list_expenses_in_range(self, owner_id: UUID, start_date: date, end_date: date) -> list[Expense]:
        rows, _ = self._client.get_rows(
            table="expenses",
            query=[
                ("owner_id", f"eq.{owner_id}"),
                ("occurred_on", f"gte.{start_date.isoformat()}"),
                ("occurred_on", f"lte.{end_date.isoformat()}"),
                ("select", _EXPENSE_COLUMNS),
            ],
            with_count=False,
        )
        return [self._parse_row(row) for row in rows]

    def update_expense(self, expense_id: UUID, changes: dict[str, object]) -> Expense:
        rows = self._client.request_rows(
            table="expenses",
            method="PATCH",
            query={"id": f"eq.{expense_id}", "select": _EXPENSE_COLUMNS},
            body=self._serialize(changes),
        )
        if not rows:
            raise ValueError("Expense not found")
        return self._parse_row(rows[0])

    def delete_expense(self, expense_id: UUID) -> None:
        rows = self._client.request_rows(
            table="expenses",
            method="DELETE",
            query={"id": f"eq.{expense_id}", "select": "id"},
        )
        if not rows:
            raise ValueError("Expense not found")
