"""Aggregate expenses into a per-category report."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Iterable

from shared.errors import ContractViolationError
from shared.models import CategoryReport, CategorySummary, Expense, ExpenseCategory


logger = logging.getLogger(__name__)

_DECLARATION_ORDER: dict[ExpenseCategory, int] = {
    category: index for index, category in enumerate(ExpenseCategory)
}


def _as_category(value: object) -> ExpenseCategory:
    try:
        return ExpenseCategory(value)
    except ValueError as exc:
        raise ContractViolationError(f"Unknown expense category: {value!r}") from exc


def _as_amount(value: object) -> Decimal:
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ContractViolationError(f"Expense amount must be a number, got {value!r}") from exc
    if not amount.is_finite() or amount < 0:
        raise ContractViolationError(f"Expense amount must be >= 0, got {amount}")
    return amount


def parse_report_date(value: str, field_name: str) -> date:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise ContractViolationError(f"{field_name} must be a YYYY-MM-DD date, got {value!r}") from exc


def aggregate_expenses_by_category(
    expenses: Iterable[Expense],
    start_date: date,
    end_date: date,
) -> tuple[tuple[CategorySummary, ...], Decimal]:
    """Sum amounts and counts per category over an inclusive date range.

    Every category is present in the result, with zero totals when no
    expense matched. Summaries are ordered by total descending; equal totals
    keep the ``ExpenseCategory`` declaration order. The range is checked here
    even when the caller already filtered the expenses.
    """

    totals: dict[ExpenseCategory, Decimal] = {category: Decimal("0") for category in ExpenseCategory}
    counts: dict[ExpenseCategory, int] = {category: 0 for category in ExpenseCategory}

    for expense in expenses:
        if not start_date <= expense.occurred_on <= end_date:
            continue
        category = _as_category(expense.category)
        totals[category] += _as_amount(expense.amount)
        counts[category] += 1

    ordered = sorted(
        ExpenseCategory,
        key=lambda category: (-totals[category], _DECLARATION_ORDER[category]),
    )
    summaries = tuple(
        CategorySummary(category=category, total=totals[category], count=counts[category])
        for category in ordered
    )
    total_amount = sum((summary.total for summary in summaries), Decimal("0"))
    return summaries, total_amount


def build_category_report(expenses: Iterable[Expense], start_date: str, end_date: str) -> CategoryReport:
    """Build the report shared by every renderer.

    ``start_date`` and ``end_date`` are kept exactly as given so documents
    echo the requested period.
    """

    period_start = parse_report_date(start_date, "start_date")
    period_end = parse_report_date(end_date, "end_date")
    categories, total_amount = aggregate_expenses_by_category(expenses, period_start, period_end)

    logger.info(
        "category_report_built start_date=%s end_date=%s total_amount=%s non_empty_categories=%s",
        start_date,
        end_date,
        total_amount,
        sum(1 for summary in categories if summary.count > 0),
    )
    return CategoryReport(
        start_date=start_date,
        end_date=end_date,
        total_amount=total_amount,
        categories=categories,
    )
