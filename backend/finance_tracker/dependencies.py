"""
FastAPI dependencies wiring the configured stores into the services.
"""
from dataclasses import dataclass

from fastapi import Depends, Request

from finance_tracker.database import get_session_factory
from finance_tracker.services.analytics_service import AnalyticsService
from finance_tracker.services.record_service import RecordService
from finance_tracker.stores.base import AdjustmentStore, BudgetStore, RecordStore
from finance_tracker.stores.sql_store import SqlAdjustmentStore, SqlBudgetStore, SqlRecordStore


@dataclass(frozen=True)
class StoreSet:
    records: RecordStore
    adjustments: AdjustmentStore
    budgets: BudgetStore


def get_stores(request: Request):
    """
    Yield the stores for one request.

    The JSON file store is a process-wide object created at startup; the SQL
    stores share a session that lives for the request.
    """
    json_store = getattr(request.app.state, "json_store", None)
    if json_store is not None:
        yield StoreSet(records=json_store, adjustments=json_store, budgets=json_store)
        return

    db = get_session_factory()()
    try:
        yield StoreSet(
            records=SqlRecordStore(db),
            adjustments=SqlAdjustmentStore(db),
            budgets=SqlBudgetStore(db),
        )
    finally:
        db.close()


def get_record_service(stores: StoreSet = Depends(get_stores)) -> RecordService:
    return RecordService(stores.records)


def get_analytics_service(stores: StoreSet = Depends(get_stores)) -> AnalyticsService:
    return AnalyticsService(stores.records, stores.adjustments, stores.budgets)


def get_budget_store(stores: StoreSet = Depends(get_stores)) -> BudgetStore:
    return stores.budgets
