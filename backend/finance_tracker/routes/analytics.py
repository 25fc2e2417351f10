from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from finance_tracker.dependencies import get_analytics_service
from finance_tracker.schemas import (
    AdjustBalanceRequest,
    CategoryBreakdown,
    FinancialSummary,
    SuccessResponse,
)
from finance_tracker.services.analytics_service import AnalyticsService
from finance_tracker.services.periods import MAX_YEAR, MIN_YEAR

router = APIRouter()


@router.get("/summary", response_model=FinancialSummary)
def get_summary(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=MIN_YEAR, le=MAX_YEAR),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Totals, savings rate and reconciled net balance for a month, or all-time"""
    return service.get_financial_summary(month, year)


@router.get("/breakdown", response_model=List[CategoryBreakdown])
def get_category_breakdown(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=MIN_YEAR, le=MAX_YEAR),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Expenses per category with their share of the scope's total"""
    return service.get_category_breakdown(month, year)


@router.post("/adjust-balance", response_model=SuccessResponse)
def adjust_balance(
    request: AdjustBalanceRequest,
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Set the true balance at the end of a month (when month and year are given)
    or the global balance adjustment.
    """
    service.adjust_balance(request.amount, request.month, request.year)
    return SuccessResponse(success=True)


@router.post("/reset", response_model=SuccessResponse)
def reset_data(service: AnalyticsService = Depends(get_analytics_service)):
    """Delete all records, adjustments and budgets."""
    service.reset_data()
    return SuccessResponse(success=True)
