"""
SQLAlchemy-backed stores. Each instance works on one request-scoped session.
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.orm import Session

from finance_tracker.errors import NotFoundError, StoreUnavailable
from finance_tracker.models import (
    GLOBAL_ADJUSTMENT_SCOPE,
    BalanceAdjustment,
    Budget as BudgetModel,
    Income,
    Outcome,
    adjustment_scope,
)
from finance_tracker.schemas import (
    AdjustmentCheckpoint,
    Budget,
    BudgetCreate,
    Record,
    RecordCreate,
    RecordKind,
)
from finance_tracker.services.periods import to_utc_midnight
from finance_tracker.stores.base import AdjustmentStore, BudgetStore, RecordStore

logger = logging.getLogger(__name__)

RECORD_MODELS = {
    RecordKind.INCOME: Income,
    RecordKind.OUTCOME: Outcome,
}


def _to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class _SqlStore:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, operation: str):
        """Translate connection-level failures into StoreUnavailable."""
        try:
            yield
        except (OperationalError, InterfaceError) as e:
            logger.error(f"[STORE] Database unavailable during {operation}: {e}")
            self.db.rollback()
            raise StoreUnavailable(f"Database unavailable during {operation}") from e


class SqlRecordStore(_SqlStore, RecordStore):
    """Income and outcome records in the income/outcome tables."""

    def _filtered(self, query, model, start: Optional[datetime], end: Optional[datetime]):
        if start is not None:
            query = query.filter(model.date >= start)
        if end is not None:
            query = query.filter(model.date < end)
        return query

    def _find(self, kind: RecordKind, record_id: int):
        model = RECORD_MODELS[kind]
        return self.db.query(model).filter(model.id == record_id).first()

    def list_records(self, kind, start=None, end=None) -> List[Record]:
        model = RECORD_MODELS[kind]
        with self._guard(f"list {kind.value}"):
            query = self._filtered(self.db.query(model), model, start, end)
            rows = query.order_by(model.date.desc(), model.id.desc()).all()
        return [Record.model_validate(row) for row in rows]

    def get_record(self, kind, record_id) -> Record:
        with self._guard(f"get {kind.value}"):
            row = self._find(kind, record_id)
        if row is None:
            raise NotFoundError(kind.value, record_id)
        return Record.model_validate(row)

    def create_record(self, kind: RecordKind, data: RecordCreate) -> Record:
        model = RECORD_MODELS[kind]
        with self._guard(f"create {kind.value}"):
            row = model(
                amount=data.amount,
                category=data.category,
                date=data.date or to_utc_midnight(),
                description=data.description,
            )
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        logger.info(f"[STORE] Created {kind.value} id={row.id} amount={row.amount} category={row.category}")
        return Record.model_validate(row)

    def update_record(self, kind, record_id, changes: dict) -> Record:
        with self._guard(f"update {kind.value}"):
            row = self._find(kind, record_id)
            if row is None:
                raise NotFoundError(kind.value, record_id)
            for field, value in changes.items():
                if field == "id":
                    continue
                setattr(row, field, value)
            self.db.commit()
            self.db.refresh(row)
        logger.info(f"[STORE] Updated {kind.value} id={record_id} fields={sorted(changes)}")
        return Record.model_validate(row)

    def delete_record(self, kind, record_id) -> None:
        model = RECORD_MODELS[kind]
        with self._guard(f"delete {kind.value}"):
            deleted = (
                self.db.query(model)
                .filter(model.id == record_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        if deleted:
            logger.info(f"[STORE] Deleted {kind.value} id={record_id}")

    def sum_amounts(self, kind, start=None, end=None) -> Decimal:
        model = RECORD_MODELS[kind]
        with self._guard(f"sum {kind.value}"):
            query = self._filtered(self.db.query(func.sum(model.amount)), model, start, end)
            total = query.scalar()
        return _to_decimal(total)

    def sum_by_category(self, kind, start=None, end=None) -> Dict[str, Decimal]:
        model = RECORD_MODELS[kind]
        with self._guard(f"sum {kind.value} by category"):
            query = self.db.query(
                model.category.label("category"),
                func.sum(model.amount).label("total"),
            )
            rows = self._filtered(query, model, start, end).group_by(model.category).all()
        return {row.category: _to_decimal(row.total) for row in rows}

    def clear_records(self) -> None:
        with self._guard("clear records"):
            for model in RECORD_MODELS.values():
                self.db.query(model).delete(synchronize_session=False)
            self.db.commit()


class SqlAdjustmentStore(_SqlStore, AdjustmentStore):
    """Balance adjustments keyed by scope ("global" or "YYYY-MM")."""

    def set_adjustment(self, amount, month=None, year=None) -> None:
        scope = adjustment_scope(month, year)
        with self._guard("set adjustment"):
            row = (
                self.db.query(BalanceAdjustment)
                .filter(BalanceAdjustment.scope == scope)
                .first()
            )
            if row is None:
                scoped = scope != GLOBAL_ADJUSTMENT_SCOPE
                row = BalanceAdjustment(
                    scope=scope,
                    year=year if scoped else None,
                    month=month if scoped else None,
                    amount=amount,
                )
                self.db.add(row)
            else:
                row.amount = amount
            self.db.commit()
        logger.info(f"[STORE] Balance adjustment set scope={scope} amount={amount}")

    def get_adjustment(self, month=None, year=None) -> Optional[Decimal]:
        scope = adjustment_scope(month, year)
        with self._guard("get adjustment"):
            amount = (
                self.db.query(BalanceAdjustment.amount)
                .filter(BalanceAdjustment.scope == scope)
                .scalar()
            )
        return None if amount is None else _to_decimal(amount)

    def get_most_recent_adjustment_before(self, month, year) -> Optional[AdjustmentCheckpoint]:
        with self._guard("find previous adjustment"):
            row = (
                self.db.query(BalanceAdjustment)
                .filter(
                    BalanceAdjustment.scope != GLOBAL_ADJUSTMENT_SCOPE,
                    or_(
                        BalanceAdjustment.year < year,
                        and_(BalanceAdjustment.year == year, BalanceAdjustment.month < month),
                    ),
                )
                .order_by(BalanceAdjustment.year.desc(), BalanceAdjustment.month.desc())
                .first()
            )
        if row is None:
            return None
        return AdjustmentCheckpoint(month=row.month, year=row.year, amount=_to_decimal(row.amount))

    def clear_adjustments(self) -> None:
        with self._guard("clear adjustments"):
            self.db.query(BalanceAdjustment).delete(synchronize_session=False)
            self.db.commit()


class SqlBudgetStore(_SqlStore, BudgetStore):

    def list_budgets(self) -> List[Budget]:
        with self._guard("list budgets"):
            rows = self.db.query(BudgetModel).order_by(BudgetModel.category, BudgetModel.id).all()
        return [Budget.model_validate(row) for row in rows]

    def create_budget(self, data: BudgetCreate) -> Budget:
        with self._guard("create budget"):
            row = BudgetModel(category=data.category, limit=data.limit, period=data.period)
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        logger.info(f"[STORE] Created budget id={row.id} category={row.category} limit={row.limit}")
        return Budget.model_validate(row)

    def delete_budget(self, budget_id) -> None:
        with self._guard("delete budget"):
            self.db.query(BudgetModel).filter(BudgetModel.id == budget_id).delete(
                synchronize_session=False
            )
            self.db.commit()

    def clear_budgets(self) -> None:
        with self._guard("clear budgets"):
            self.db.query(BudgetModel).delete(synchronize_session=False)
            self.db.commit()
