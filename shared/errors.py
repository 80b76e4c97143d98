"""Typed failures raised by the expense and reporting layers."""

from __future__ import annotations

from uuid import UUID


class ContractViolationError(ValueError):
    """Raised when an input breaks a stated invariant (unknown category, bad page...)."""


class ReportRenderingError(RuntimeError):
    """Raised when a report document cannot be generated."""


class ExpenseNotFoundError(LookupError):
    """Raised when an expense id does not exist."""

    def __init__(self, expense_id: UUID) -> None:
        super().__init__(f"Expense with ID {expense_id} not found")
        self.expense_id = expense_id


class ExpenseAccessDeniedError(PermissionError):
    """Raised when an expense exists but belongs to another owner."""

    def __init__(self, expense_id: UUID) -> None:
        super().__init__("You do not have permission to access this expense")
        self.expense_id = expense_id
