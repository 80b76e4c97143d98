"""HTTP API for expenses and category reports."""

from __future__ import annotations

import logging
from datetime import date
from functools import lru_cache
from typing import Any
from uuid import UUID

from fastapi import FastAPI, Header, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse, Response, StreamingResponse
from starlette.background import BackgroundTask

from backend.auth.supabase_auth import UnauthorizedError, get_user_from_bearer_token
from backend.factory import build_expense_service
from backend.reporting.report_payload import render_compact_report_payload, render_report_payload
from backend.services.expense_service import ExpenseService
from shared import config as _config
from shared.errors import (
    ContractViolationError,
    ExpenseAccessDeniedError,
    ExpenseNotFoundError,
    ReportRenderingError,
)
from shared.models import (
    Expense,
    ExpenseCategory,
    ExpenseCreateRequest,
    ExpenseFilters,
    ExpenseUpdateRequest,
    PaginatedResponse,
)
from shared.pagination import get_pagination_response


logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_expense_service() -> ExpenseService:
    """Create and cache the expense service once per process."""

    return build_expense_service()


def _extract_bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    prefix = "Bearer "
    if not authorization.startswith(prefix):
        raise HTTPException(status_code=401, detail="Invalid Authorization header")
    token = authorization[len(prefix) :].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    return token


def _resolve_owner_id(authorization: str | None) -> UUID:
    """Resolve the authenticated user id from the authorization header."""

    token = _extract_bearer_token(authorization)
    try:
        user = get_user_from_bearer_token(token)
    except UnauthorizedError as exc:
        raise HTTPException(status_code=401, detail="Unauthorized") from exc
    return user.id


app = FastAPI(title="Expense Reports API")

ALLOW_ORIGINS = _config.cors_allow_origins()


@app.middleware("http")
async def log_http_requests(request: Request, call_next):
    """Log incoming requests, HTTP status codes and unexpected errors."""

    logger.info("http_request_received method=%s path=%s", request.method, request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "http_request_failed method=%s path=%s",
            request.method,
            request.url.path,
        )
        raise

    logger.info(
        "http_response_sent method=%s path=%s status_code=%s",
        request.method,
        request.url.path,
        response.status_code,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info("cors_allow_origins=%s", ALLOW_ORIGINS)


@app.exception_handler(ContractViolationError)
async def handle_contract_violation(request: Request, exc: ContractViolationError) -> JSONResponse:
    logger.warning("contract_violation path=%s message=%s", request.url.path, str(exc))
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(ExpenseNotFoundError)
async def handle_expense_not_found(request: Request, exc: ExpenseNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ExpenseAccessDeniedError)
async def handle_expense_access_denied(request: Request, exc: ExpenseAccessDeniedError) -> JSONResponse:
    return JSONResponse(status_code=403, content={"detail": str(exc)})


@app.exception_handler(ReportRenderingError)
async def handle_report_rendering_error(request: Request, exc: ReportRenderingError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"detail": "Report generation failed"})


@app.exception_handler(Exception)
async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Return a JSON 500 response for unhandled exceptions."""

    logger.exception(
        "unhandled_exception method=%s path=%s exception_type=%s message=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        str(exc),
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.get("/health")
def health() -> dict[str, str]:
    """Healthcheck endpoint."""

    return {"status": "ok"}


@app.get("/expenses", response_model=PaginatedResponse[Expense])
def list_expenses(
    authorization: str | None = Header(default=None),
    start_date: date | None = None,
    end_date: date | None = None,
    category: ExpenseCategory | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> PaginatedResponse[Expense]:
    owner_id = _resolve_owner_id(authorization)
    filters = ExpenseFilters(
        start_date=start_date,
        end_date=end_date,
        category=category,
        page=page,
        limit=limit,
    )
    result = get_expense_service().find_all(owner_id, filters)
    return get_pagination_response(result.data, result.total, result.limit, result.page)


@app.get("/expenses/reports/category")
def get_category_report(
    start_date: str,
    end_date: str,
    compact: bool = False,
    authorization: str | None = Header(default=None),
) -> Any:
    owner_id = _resolve_owner_id(authorization)
    logger.info(
        "category_report_requested owner_id=%s start_date=%s end_date=%s format=json",
        owner_id,
        start_date,
        end_date,
    )
    report = get_expense_service().get_category_report(owner_id, start_date, end_date)
    if compact:
        return render_compact_report_payload(report)
    return render_report_payload(report)


@app.get("/expenses/reports/category/pdf")
def get_category_report_pdf(
    start_date: str,
    end_date: str,
    authorization: str | None = Header(default=None),
) -> StreamingResponse:
    owner_id = _resolve_owner_id(authorization)
    logger.info(
        "category_report_requested owner_id=%s start_date=%s end_date=%s format=pdf",
        owner_id,
        start_date,
        end_date,
    )
    document = get_expense_service().generate_report_pdf(owner_id, start_date, end_date)
    return StreamingResponse(
        document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": document.content_disposition},
        background=BackgroundTask(document.close),
    )


@app.get("/expenses/reports/category/excel")
def get_category_report_excel(
    start_date: str,
    end_date: str,
    authorization: str | None = Header(default=None),
) -> Response:
    owner_id = _resolve_owner_id(authorization)
    logger.info(
        "category_report_requested owner_id=%s start_date=%s end_date=%s format=xlsx",
        owner_id,
        start_date,
        end_date,
    )
    document = get_expense_service().generate_report_excel(owner_id, start_date, end_date)
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": document.content_disposition},
    )


@app.get("/expenses/{expense_id}", response_model=Expense)
def get_expense(expense_id: UUID, authorization: str | None = Header(default=None)) -> Expense:
    owner_id = _resolve_owner_id(authorization)
    return get_expense_service().find_one(expense_id, owner_id)


@app.post("/expenses", response_model=Expense, status_code=201)
def create_expense(payload: ExpenseCreateRequest, authorization: str | None = Header(default=None)) -> Expense:
    owner_id = _resolve_owner_id(authorization)
    return get_expense_service().create(owner_id, payload)


@app.patch("/expenses/{expense_id}", response_model=Expense)
def update_expense(
    expense_id: UUID,
    payload: ExpenseUpdateRequest,
    authorization: str | None = Header(default=None),
) -> Expense:
    owner_id = _resolve_owner_id(authorization)
    return get_expense_service().update(expense_id, owner_id, payload)


@app.delete("/expenses/{expense_id}", status_code=204)
def delete_expense(expense_id: UUID, authorization: str | None = Header(default=None)) -> Response:
    owner_id = _resolve_owner_id(authorization)
    get_expense_service().remove(expense_id, owner_id)
    return Response(status_code=204)
