"""Expense CRUD and category reporting for one authenticated owner."""

from __future__ import annotations

import logging
from uuid import UUID

from backend.reporting.category_report import build_category_report, parse_report_date
from backend.reporting.exports import PDF_MEDIA_TYPE, XLSX_MEDIA_TYPE, ReportDocument, report_filename
from backend.reporting.report_pdf import stream_category_report_pdf
from backend.reporting.report_xlsx import render_category_report_xlsx
from backend.repositories.expenses_repository import ExpensesRepository
from shared.errors import ExpenseAccessDeniedError, ExpenseNotFoundError
from shared.models import (
    CategoryReport,
    Expense,
    ExpenseCreateRequest,
    ExpenseFilters,
    ExpenseUpdateRequest,
    PaginationResult,
)
from shared.pagination import create_pagination_result


logger = logging.getLogger(__name__)


class ExpenseService:
    """Owner-scoped operations on expenses."""

    def __init__(self, repository: ExpensesRepository) -> None:
        self._repository = repository

    def create(self, owner_id: UUID, request: ExpenseCreateRequest) -> Expense:
        expense = self._repository.create_expense(owner_id, request)
        logger.info("expense_created owner_id=%s expense_id=%s", owner_id, expense.id)
        return expense

    def find_all(self, owner_id: UUID, filters: ExpenseFilters) -> PaginationResult[Expense]:
        items, total = self._repository.list_expenses(owner_id, filters)
        return create_pagination_result(items, total, filters.page, filters.limit)

    def find_one(self, expense_id: UUID, owner_id: UUID) -> Expense:
        expense = self._repository.get_expense(expense_id)
        if expense is None:
            raise ExpenseNotFoundError(expense_id)
        if expense.owner_id != owner_id:
            logger.warning("expense_access_denied owner_id=%s expense_id=%s", owner_id, expense_id)
            raise ExpenseAccessDeniedError(expense_id)
        return expense

    def update(self, expense_id: UUID, owner_id: UUID, request: ExpenseUpdateRequest) -> Expense:
        expense = self.find_one(expense_id, owner_id)
        changes = request.changes()
        if not changes:
            return expense
        updated = self._repository.update_expense(expense_id, changes)
        logger.info("expense_updated owner_id=%s expense_id=%s fields=%s", owner_id, expense_id, sorted(changes))
        return updated

    def remove(self, expense_id: UUID, owner_id: UUID) -> None:
        self.find_one(expense_id, owner_id)
        self._repository.delete_expense(expense_id)
        logger.info("expense_deleted owner_id=%s expense_id=%s", owner_id, expense_id)

    def get_category_report(self, owner_id: UUID, start_date: str, end_date: str) -> CategoryReport:
        expenses = self._repository.list_expenses_in_range(
            owner_id,
            parse_report_date(start_date, "start_date"),
            parse_report_date(end_date, "end_date"),
        )
        return build_category_report(expenses, start_date, end_date)

    def generate_report_pdf(self, owner_id: UUID, start_date: str, end_date: str) -> ReportDocument:
        report = self.get_category_report(owner_id, start_date, end_date)
        return ReportDocument(
            media_type=PDF_MEDIA_TYPE,
            filename=report_filename(start_date, end_date, "pdf"),
            content=stream_category_report_pdf(report),
        )

    def generate_report_excel(self, owner_id: UUID, start_date: str, end_date: str) -> ReportDocument:
        report = self.get_category_report(owner_id, start_date, end_date)
        return ReportDocument(
            media_type=XLSX_MEDIA_TYPE,
            filename=report_filename(start_date, end_date, "xlsx"),
            content=render_category_report_xlsx(report),
        )
