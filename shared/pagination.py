"""Page/limit arithmetic for paginated listings."""

from __future__ import annotations

from typing import Sequence, TypeVar

from shared.errors import ContractViolationError
from shared.models import PaginatedResponse, PaginationMeta, PaginationResult


T = TypeVar("T")


def _check_page_and_limit(page: int, limit: int) -> None:
    if page < 1:
        raise ContractViolationError(f"page must be >= 1, got {page}")
    if limit < 1:
        raise ContractViolationError(f"limit must be >= 1, got {limit}")


def calculate_skip(page: int, limit: int) -> int:
    """Return the number of rows to skip before the requested page."""
    _check_page_and_limit(page, limit)
    return (page - 1) * limit


def create_pagination_result(data: Sequence[T], total: int, page: int, limit: int) -> PaginationResult[T]:
    return PaginationResult(data=list(data), total=total, page=page, limit=limit)


def build_pagination_meta(total: int, limit: int, page: int) -> PaginationMeta:
    """Derive page count and navigation flags.

    With ``total == 0`` there are no pages, so both flags are false whatever
    ``page`` is.
    """
    _check_page_and_limit(page, limit)
    if total < 0:
        raise ContractViolationError(f"total must be >= 0, got {total}")

    total_pages = -(-total // limit)
    return PaginationMeta(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_previous_page=page > 1 and total_pages > 0,
    )


def get_pagination_response(data: Sequence[T], total: int, limit: int, page: int) -> PaginatedResponse[T]:
    return PaginatedResponse(data=list(data), meta=build_pagination_meta(total, limit, page))
