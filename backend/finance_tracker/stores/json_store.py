"""
Flat-file store keeping every record, adjustment and budget in one JSON document.

File layout:
    {
        "income": [...], "outcome": [...],
        "nextIncomeId": 1, "nextOutcomeId": 1,
        "adjustments": {"global": "0.00", "2025-01": "1000.00"},
        "budgets": [...], "nextBudgetId": 1
    }

Amounts are stored as decimal strings and dates as ISO timestamps at UTC midnight.
Files written by older versions hold a single "transactions" list instead;
they are split into income and outcome on first load.

Mutations work on a copy of the document. The copy replaces the in-memory
document only after it has been written to disk, and all stores on the same
path share one lock.
"""
import copy
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from finance_tracker.errors import NotFoundError, StoreUnavailable
from finance_tracker.models import GLOBAL_ADJUSTMENT_SCOPE, adjustment_scope
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

NEXT_ID_KEYS = {
    RecordKind.INCOME: "nextIncomeId",
    RecordKind.OUTCOME: "nextOutcomeId",
}


def _empty_document() -> dict:
    return {
        "income": [],
        "outcome": [],
        "nextIncomeId": 1,
        "nextOutcomeId": 1,
        "adjustments": {},
        "budgets": [],
        "nextBudgetId": 1,
    }


def _dump_record(record: Record) -> dict:
    return record.model_dump(mode="json")


def _load_record(raw: dict) -> Record:
    record = Record.model_validate(raw)
    return record.model_copy(update={"date": to_utc_midnight(record.date)})


def _migrate_transactions(transactions: List[dict]) -> dict:
    """Split a legacy single transactions list into income and outcome with fresh ids."""
    document = _empty_document()
    for raw in transactions:
        kind = RecordKind.INCOME if raw.get("type") == "income" else RecordKind.OUTCOME
        next_key = NEXT_ID_KEYS[kind]
        entry = {key: value for key, value in raw.items() if key != "type"}
        entry["id"] = document[next_key]
        entry.setdefault("description", None)
        document[next_key] += 1
        document[kind.value].append(entry)
    return document


def _in_window(record: Record, start: Optional[datetime], end: Optional[datetime]) -> bool:
    if start is not None and record.date < start:
        return False
    if end is not None and record.date >= end:
        return False
    return True


class JsonFileStore(RecordStore, AdjustmentStore, BudgetStore):
    """
    Single-file store implementing all three store interfaces.
    The document is loaded once and rewritten atomically after every mutation.
    """

    _path_locks: Dict[str, threading.RLock] = {}
    _path_locks_guard = threading.Lock()

    def __init__(self, path: Path):
        self.path = Path(path)
        self._data: Optional[dict] = None
        abs_path = str(self.path.resolve())
        with self._path_locks_guard:
            if abs_path not in self._path_locks:
                self._path_locks[abs_path] = threading.RLock()
            self._lock = self._path_locks[abs_path]

    # Persistence

    def _load(self) -> dict:
        with self._lock:
            if self._data is None:
                self._data = self._read()
            return self._data

    def _read(self) -> dict:
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info(f"[STORE] No data file at {self.path}, starting empty")
            document = _empty_document()
            self._write(document)
            return document
        except OSError as e:
            logger.error(f"[STORE] Cannot read {self.path}: {e}")
            raise StoreUnavailable(f"Cannot read data file {self.path}") from e

        try:
            parsed = json.loads(content)
            legacy = isinstance(parsed, dict) and "transactions" in parsed
            if legacy:
                logger.info(f"[STORE] Migrating legacy transactions list in {self.path}")
                document = _migrate_transactions(parsed["transactions"])
            else:
                document = _empty_document()
                document.update(parsed)
            for kind in RecordKind:
                document[kind.value] = [
                    _dump_record(_load_record(raw)) for raw in document[kind.value]
                ]
        except (ValueError, TypeError, KeyError, PydanticValidationError) as e:
            logger.error(f"[STORE] Data file {self.path} is corrupt: {e}")
            raise StoreUnavailable(f"Data file {self.path} is not a valid tracker document") from e

        if legacy:
            self._write(document)
        return document

    def _write(self, document: dict) -> None:
        directory = self.path.parent
        tmp_path = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=f".{self.path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"[STORE] Cannot write {self.path}: {e}")
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StoreUnavailable(f"Cannot write data file {self.path}") from e

    @contextmanager
    def _transaction(self):
        """
        Yield a private copy of the document for mutation.
        The copy becomes the current document once it is on disk; on any
        error the current document is left as it was.
        """
        with self._lock:
            draft = copy.deepcopy(self._load())
            yield draft
            self._write(draft)
            self._data = draft

    def _records(self, kind: RecordKind) -> List[Record]:
        return [Record.model_validate(raw) for raw in self._load()[kind.value]]

    # RecordStore

    def list_records(self, kind, start=None, end=None) -> List[Record]:
        records = [r for r in self._records(kind) if _in_window(r, start, end)]
        return sorted(records, key=lambda r: (r.date, r.id), reverse=True)

    def get_record(self, kind, record_id) -> Record:
        for record in self._records(kind):
            if record.id == record_id:
                return record
        raise NotFoundError(kind.value, record_id)

    def create_record(self, kind: RecordKind, data: RecordCreate) -> Record:
        next_key = NEXT_ID_KEYS[kind]
        with self._transaction() as document:
            record = Record(
                id=document[next_key],
                amount=data.amount,
                category=data.category,
                date=data.date or to_utc_midnight(),
                description=data.description,
            )
            document[next_key] += 1
            document[kind.value].append(_dump_record(record))
        logger.info(f"[STORE] Created {kind.value} id={record.id} amount={record.amount} category={record.category}")
        return record

    def update_record(self, kind, record_id, changes: dict) -> Record:
        updates = {field: value for field, value in changes.items() if field != "id"}
        with self._transaction() as document:
            entries = document[kind.value]
            for index, raw in enumerate(entries):
                if raw["id"] == record_id:
                    record = Record.model_validate(raw).model_copy(update=updates)
                    entries[index] = _dump_record(record)
                    break
            else:
                raise NotFoundError(kind.value, record_id)
        logger.info(f"[STORE] Updated {kind.value} id={record_id} fields={sorted(updates)}")
        return record

    def delete_record(self, kind, record_id) -> None:
        with self._lock:
            if not any(raw["id"] == record_id for raw in self._load()[kind.value]):
                return
            with self._transaction() as document:
                document[kind.value] = [raw for raw in document[kind.value] if raw["id"] != record_id]
        logger.info(f"[STORE] Deleted {kind.value} id={record_id}")

    def sum_amounts(self, kind, start=None, end=None) -> Decimal:
        return sum(
            (r.amount for r in self._records(kind) if _in_window(r, start, end)),
            Decimal("0"),
        )

    def sum_by_category(self, kind, start=None, end=None) -> Dict[str, Decimal]:
        totals: Dict[str, Decimal] = {}
        for record in self._records(kind):
            if _in_window(record, start, end):
                totals[record.category] = totals.get(record.category, Decimal("0")) + record.amount
        return totals

    def clear_records(self) -> None:
        with self._transaction() as document:
            document["income"] = []
            document["outcome"] = []

    # AdjustmentStore

    def set_adjustment(self, amount, month=None, year=None) -> None:
        scope = adjustment_scope(month, year)
        with self._transaction() as document:
            document["adjustments"][scope] = str(amount)
        logger.info(f"[STORE] Balance adjustment set scope={scope} amount={amount}")

    def get_adjustment(self, month=None, year=None) -> Optional[Decimal]:
        raw = self._load()["adjustments"].get(adjustment_scope(month, year))
        return None if raw is None else Decimal(raw)

    def get_most_recent_adjustment_before(self, month, year) -> Optional[AdjustmentCheckpoint]:
        best: Optional[AdjustmentCheckpoint] = None
        for scope, raw in self._load()["adjustments"].items():
            if scope == GLOBAL_ADJUSTMENT_SCOPE:
                continue
            scope_year, scope_month = (int(part) for part in scope.split("-"))
            if (scope_year, scope_month) >= (year, month):
                continue
            if best is None or (scope_year, scope_month) > (best.year, best.month):
                best = AdjustmentCheckpoint(month=scope_month, year=scope_year, amount=Decimal(raw))
        return best

    def clear_adjustments(self) -> None:
        with self._transaction() as document:
            document["adjustments"] = {}

    # BudgetStore

    def list_budgets(self) -> List[Budget]:
        budgets = [Budget.model_validate(raw) for raw in self._load()["budgets"]]
        return sorted(budgets, key=lambda b: (b.category, b.id))

    def create_budget(self, data: BudgetCreate) -> Budget:
        with self._transaction() as document:
            budget = Budget(
                id=document["nextBudgetId"],
                category=data.category,
                limit=data.limit,
                period=data.period,
            )
            document["nextBudgetId"] += 1
            document["budgets"].append(budget.model_dump(mode="json"))
        logger.info(f"[STORE] Created budget id={budget.id} category={budget.category} limit={budget.limit}")
        return budget

    def delete_budget(self, budget_id) -> None:
        with self._lock:
            if not any(raw["id"] == budget_id for raw in self._load()["budgets"]):
                return
            with self._transaction() as document:
                document["budgets"] = [raw for raw in document["budgets"] if raw["id"] != budget_id]

    def clear_budgets(self) -> None:
        with self._transaction() as document:
            document["budgets"] = []
