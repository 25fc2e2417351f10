"""
Store interfaces consumed by the aggregation service.

Any persistence backend (SQL database, JSON file, ...) implements these.
Window arguments are half-open: start <= date < end, None meaning unbounded.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from finance_tracker.schemas import (
    AdjustmentCheckpoint,
    Budget,
    BudgetCreate,
    Record,
    RecordCreate,
    RecordKind,
)


class RecordStore(ABC):
    """Income and outcome records. The two kinds have independent id sequences."""

    @abstractmethod
    def list_records(
        self,
        kind: RecordKind,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Record]:
        """Records dated within the window, newest first."""
        pass

    @abstractmethod
    def get_record(self, kind: RecordKind, record_id: int) -> Record:
        """Raises NotFoundError when the id is unknown."""
        pass

    @abstractmethod
    def create_record(self, kind: RecordKind, data: RecordCreate) -> Record:
        pass

    @abstractmethod
    def update_record(self, kind: RecordKind, record_id: int, changes: dict) -> Record:
        """
        Apply only the fields present in changes.
        Raises NotFoundError when the id is unknown.
        """
        pass

    @abstractmethod
    def delete_record(self, kind: RecordKind, record_id: int) -> None:
        """Idempotent: deleting an unknown id is a no-op."""
        pass

    @abstractmethod
    def sum_amounts(
        self,
        kind: RecordKind,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Decimal:
        pass

    @abstractmethod
    def sum_by_category(
        self,
        kind: RecordKind,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Dict[str, Decimal]:
        pass

    @abstractmethod
    def clear_records(self) -> None:
        pass


class AdjustmentStore(ABC):
    """Manual balance adjustments: one global value plus per-(year, month) checkpoints."""

    @abstractmethod
    def set_adjustment(
        self,
        amount: Decimal,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> None:
        """Upsert the monthly value when both month and year are given, else the global one."""
        pass

    @abstractmethod
    def get_adjustment(
        self,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> Optional[Decimal]:
        pass

    @abstractmethod
    def get_most_recent_adjustment_before(
        self, month: int, year: int
    ) -> Optional[AdjustmentCheckpoint]:
        """Latest monthly checkpoint strictly earlier than (year, month)."""
        pass

    @abstractmethod
    def clear_adjustments(self) -> None:
        pass


class BudgetStore(ABC):
    """Per-category spending limits."""

    @abstractmethod
    def list_budgets(self) -> List[Budget]:
        pass

    @abstractmethod
    def create_budget(self, data: BudgetCreate) -> Budget:
        pass

    @abstractmethod
    def delete_budget(self, budget_id: int) -> None:
        """Idempotent: deleting an unknown id is a no-op."""
        pass

    @abstractmethod
    def clear_budgets(self) -> None:
        pass
