"""Composition root for backend services."""

from __future__ import annotations

import logging

from backend.db.supabase_client import SupabaseClient, SupabaseSettings
from backend.repositories.expenses_repository import (
    ExpensesRepository,
    InMemoryExpensesRepository,
    SupabaseExpensesRepository,
)
from backend.services.expense_service import ExpenseService
from shared import config


logger = logging.getLogger(__name__)


def build_expenses_repository() -> ExpensesRepository:
    """Use Supabase when configured, otherwise an in-process repository."""

    supabase_url = config.supabase_url()
    supabase_key = config.supabase_service_role_key()
    if supabase_url and supabase_key:
        client = SupabaseClient(
            settings=SupabaseSettings(
                url=supabase_url,
                service_role_key=supabase_key,
                anon_key=config.supabase_anon_key(),
            )
        )
        return SupabaseExpensesRepository(client=client)

    logger.warning("expenses_repository_in_memory app_env=%s", config.app_env())
    return InMemoryExpensesRepository()


def build_expense_service() -> ExpenseService:
    return ExpenseService(repository=build_expenses_repository())
