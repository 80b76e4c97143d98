"""Tests for per-category aggregation and the report payload."""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest
from pydantic import ValidationError

from backend.reporting.category_report import aggregate_expenses_by_category, build_category_report
from backend.reporting.report_payload import render_compact_report_payload, render_report_payload
from shared.errors import ContractViolationError
from shared.models import Expense, ExpenseCategory


OWNER_ID = UUID("aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa")


def _expense(category: ExpenseCategory, amount: str, occurred_on: str) -> Expense:
    return Expense(
        id=uuid4(),
        owner_id=OWNER_ID,
        title=f"{category.value} expense",
        amount=Decimal(amount),
        occurred_on=date.fromisoformat(occurred_on),
        category=category,
    )


def _january_expenses() -> list[Expense]:
    return [
        _expense(ExpenseCategory.FOOD, "100", "2024-01-15"),
        _expense(ExpenseCategory.FOOD, "50", "2024-01-16"),
        _expense(ExpenseCategory.TRANSPORTATION, "75", "2024-01-17"),
    ]


def test_report_totals_and_ranks_categories() -> None:
    report = build_category_report(_january_expenses(), "2024-01-01", "2024-01-31")

    assert report.start_date == "2024-01-01"
    assert report.end_date == "2024-01-31"
    assert report.total_amount == Decimal("225")
    assert len(report.categories) == len(ExpenseCategory)

    food, transportation, *rest = report.categories
    assert (food.category, food.total, food.count) == (ExpenseCategory.FOOD, Decimal("150"), 2)
    assert (transportation.category, transportation.total, transportation.count) == (
        ExpenseCategory.TRANSPORTATION,
        Decimal("75"),
        1,
    )
    assert all(summary.total == 0 and summary.count == 0 for summary in rest)
    assert [summary.category for summary in rest] == [
        category
        for category in ExpenseCategory
        if category not in {ExpenseCategory.FOOD, ExpenseCategory.TRANSPORTATION}
    ]


def test_empty_expense_list_keeps_every_category() -> None:
    report = build_category_report([], "2024-01-01", "2024-01-31")

    assert report.total_amount == Decimal("0")
    assert [summary.category for summary in report.categories] == list(ExpenseCategory)
    assert all(summary.total == 0 and summary.count == 0 for summary in report.categories)


def test_each_category_appears_exactly_once() -> None:
    expenses = [_expense(category, "1", "2024-01-10") for category in ExpenseCategory for _ in range(3)]

    report = build_category_report(expenses, "2024-01-01", "2024-01-31")

    categories = [summary.category for summary in report.categories]
    assert len(categories) == len(ExpenseCategory)
    assert set(categories) == set(ExpenseCategory)


def test_equal_totals_keep_declaration_order() -> None:
    expenses = [
        _expense(ExpenseCategory.OTHER, "20", "2024-01-02"),
        _expense(ExpenseCategory.SHOPPING, "20", "2024-01-03"),
        _expense(ExpenseCategory.ENTERTAINMENT, "20", "2024-01-04"),
        _expense(ExpenseCategory.HEALTHCARE, "35", "2024-01-05"),
    ]

    categories, _ = aggregate_expenses_by_category(expenses, date(2024, 1, 1), date(2024, 1, 31))

    assert [summary.category for summary in categories[:4]] == [
        ExpenseCategory.HEALTHCARE,
        ExpenseCategory.ENTERTAINMENT,
        ExpenseCategory.SHOPPING,
        ExpenseCategory.OTHER,
    ]


def test_range_is_inclusive_on_both_ends() -> None:
    expenses = [
        _expense(ExpenseCategory.FOOD, "1", "2023-12-31"),
        _expense(ExpenseCategory.FOOD, "10", "2024-01-01"),
        _expense(ExpenseCategory.FOOD, "100", "2024-01-31"),
        _expense(ExpenseCategory.FOOD, "1000", "2024-02-01"),
    ]

    report = build_category_report(expenses, "2024-01-01", "2024-01-31")

    assert report.total_amount == Decimal("110")
    assert report.categories[0].count == 2


def test_decimal_sums_do_not_drift() -> None:
    expenses = [_expense(ExpenseCategory.UTILITIES, "0.10", "2024-01-05") for _ in range(3)]
    expenses.append(_expense(ExpenseCategory.EDUCATION, "0.20", "2024-01-06"))

    report = build_category_report(expenses, "2024-01-01", "2024-01-31")

    assert report.total_amount == Decimal("0.50")
    assert report.categories[0].total == Decimal("0.30")
    assert report.total_amount == sum((summary.total for summary in report.categories), Decimal("0"))


def test_reversed_range_yields_empty_report() -> None:
    report = build_category_report(_january_expenses(), "2024-01-31", "2024-01-01")

    assert report.total_amount == Decimal("0")
    assert all(summary.count == 0 for summary in report.categories)


def test_unknown_category_is_a_contract_violation() -> None:
    record = SimpleNamespace(category="gambling", amount=Decimal("5"), occurred_on=date(2024, 1, 10))

    with pytest.raises(ContractViolationError, match="gambling"):
        aggregate_expenses_by_category([record], date(2024, 1, 1), date(2024, 1, 31))


def test_negative_amount_is_a_contract_violation() -> None:
    record = SimpleNamespace(category=ExpenseCategory.FOOD, amount=Decimal("-5"), occurred_on=date(2024, 1, 10))

    with pytest.raises(ContractViolationError):
        aggregate_expenses_by_category([record], date(2024, 1, 1), date(2024, 1, 31))


@pytest.mark.parametrize("amount", [None, "abc", Decimal("NaN")])
def test_non_numeric_amount_is_a_contract_violation(amount) -> None:
    record = SimpleNamespace(category=ExpenseCategory.FOOD, amount=amount, occurred_on=date(2024, 1, 10))

    with pytest.raises(ContractViolationError):
        aggregate_expenses_by_category([record], date(2024, 1, 1), date(2024, 1, 31))


@pytest.mark.parametrize("bad_date", ["2024-13-01", "01/01/2024", ""])
def test_unparsable_report_dates_are_rejected(bad_date: str) -> None:
    with pytest.raises(ContractViolationError):
        build_category_report([], bad_date, "2024-01-31")


def test_report_is_immutable() -> None:
    report = build_category_report(_january_expenses(), "2024-01-01", "2024-01-31")

    with pytest.raises(ValidationError):
        report.total_amount = Decimal("0")


def test_report_payload_is_identity() -> None:
    report = build_category_report(_january_expenses(), "2024-01-01", "2024-01-31")

    assert render_report_payload(report) is report


def test_compact_payload_drops_empty_categories_only_from_display() -> None:
    report = build_category_report(_january_expenses(), "2024-01-01", "2024-01-31")

    payload = render_compact_report_payload(report)

    assert [item["category"] for item in payload["categories"]] == ["food", "transportation"]
    assert Decimal(payload["total_amount"]) == Decimal("225")
    assert payload["start_date"] == "2024-01-01"
    assert len(report.categories) == len(ExpenseCategory)
