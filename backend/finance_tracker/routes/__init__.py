from fastapi import APIRouter
from finance_tracker.routes import analytics, budgets
from finance_tracker.routes.records import build_records_router
from finance_tracker.schemas import RecordKind

api_router = APIRouter()

api_router.include_router(build_records_router(RecordKind.INCOME), prefix="/income", tags=["income"])
api_router.include_router(build_records_router(RecordKind.OUTCOME), prefix="/outcome", tags=["outcome"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
api_router.include_router(budgets.router, prefix="/budgets", tags=["budgets"])
