from fastapi import APIRouter, Depends, Query, Response
from typing import List, Optional

from finance_tracker.dependencies import get_analytics_service, get_budget_store
from finance_tracker.schemas import Budget, BudgetCreate, BudgetStatus
from finance_tracker.services.analytics_service import AnalyticsService
from finance_tracker.services.periods import MAX_YEAR, MIN_YEAR
from finance_tracker.stores.base import BudgetStore

router = APIRouter()


@router.get("", response_model=List[Budget])
def list_budgets(store: BudgetStore = Depends(get_budget_store)):
    return store.list_budgets()


@router.get("/status", response_model=List[BudgetStatus])
def get_budget_status(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=MIN_YEAR, le=MAX_YEAR),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Spending against each budget for a month, or all-time"""
    return service.get_budget_status(month, year)


@router.post("", response_model=Budget, status_code=201)
def create_budget(budget: BudgetCreate, store: BudgetStore = Depends(get_budget_store)):
    return store.create_budget(budget)


@router.delete("/{budget_id}", status_code=204)
def delete_budget(budget_id: int, store: BudgetStore = Depends(get_budget_store)):
    store.delete_budget(budget_id)
    return Response(status_code=204)
