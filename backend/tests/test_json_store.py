"""
Tests specific to the JSON file store: persistence, legacy files, unreadable data
and concurrent or failed writes.
"""
import json
import os
import sys
import threading
from datetime import date, datetime
from decimal import Decimal

import pytest

from finance_tracker.errors import StoreUnavailable
from finance_tracker.schemas import BudgetCreate, RecordCreate, RecordKind
from finance_tracker.stores.json_store import JsonFileStore


def test_missing_file_is_created_empty(tmp_path) -> None:
    path = tmp_path / "nested" / "data.json"
    store = JsonFileStore(path)

    assert store.list_records(RecordKind.INCOME) == []
    document = json.loads(path.read_text())
    assert document["nextIncomeId"] == 1
    assert document["adjustments"] == {}


def test_data_survives_a_new_store_instance(tmp_path) -> None:
    path = tmp_path / "data.json"
    first = JsonFileStore(path)
    first.create_record(
        RecordKind.OUTCOME,
        RecordCreate(amount=Decimal("12.34"), category="Books", date=date(2025, 4, 2)),
    )
    first.set_adjustment(Decimal("700.00"), 4, 2025)
    first.create_budget(BudgetCreate(category="Books", limit=Decimal("50.00")))

    second = JsonFileStore(path)
    [record] = second.list_records(RecordKind.OUTCOME)

    assert record.amount == Decimal("12.34")
    assert record.date == datetime(2025, 4, 2)
    assert second.get_adjustment(4, 2025) == Decimal("700.00")
    assert [b.category for b in second.list_budgets()] == ["Books"]
    created = second.create_record(
        RecordKind.OUTCOME, RecordCreate(amount=Decimal("1.00"), category="Books")
    )
    assert created.id == 2


def test_amounts_are_written_as_decimal_strings(tmp_path) -> None:
    path = tmp_path / "data.json"
    store = JsonFileStore(path)
    store.create_record(
        RecordKind.INCOME,
        RecordCreate(amount=Decimal("0.10"), category="Interest", date=date(2025, 1, 1)),
    )

    document = json.loads(path.read_text())

    assert document["income"][0]["amount"] == "0.10"
    assert document["income"][0]["date"] == "2025-01-01T00:00:00"


def test_legacy_transactions_list_is_migrated(tmp_path) -> None:
    path = tmp_path / "data.json"
    path.write_text(
        json.dumps(
            {
                "transactions": [
                    {"type": "income", "amount": 3000, "category": "Salary", "date": "2024-11-01"},
                    {"type": "expense", "amount": "25.50", "category": "Food", "date": "2024-11-03T15:00:00"},
                    {"type": "income", "amount": 40, "category": "Gift", "date": "2024-11-20"},
                ]
            }
        )
    )

    store = JsonFileStore(path)

    income = store.list_records(RecordKind.INCOME)
    outcome = store.list_records(RecordKind.OUTCOME)
    assert [(r.id, r.category) for r in income] == [(2, "Gift"), (1, "Salary")]
    assert [(r.id, r.amount, r.date) for r in outcome] == [
        (1, Decimal("25.50"), datetime(2024, 11, 3))
    ]

    rewritten = json.loads(path.read_text())
    assert "transactions" not in rewritten
    assert rewritten["nextIncomeId"] == 3
    assert rewritten["nextOutcomeId"] == 2


@pytest.mark.parametrize(
    "content",
    ["{not json", "[1, 2, 3]", '{"income": [{"id": 1}]}'],
)
def test_corrupt_file_raises_store_unavailable(tmp_path, content) -> None:
    path = tmp_path / "data.json"
    path.write_text(content)

    with pytest.raises(StoreUnavailable):
        JsonFileStore(path).list_records(RecordKind.INCOME)

    assert path.read_text() == content


def test_unreadable_path_raises_store_unavailable(tmp_path) -> None:
    with pytest.raises(StoreUnavailable):
        JsonFileStore(tmp_path).list_records(RecordKind.OUTCOME)


def test_concurrent_creates_get_unique_ids(tmp_path) -> None:
    store = JsonFileStore(tmp_path / "data.json")
    created = []
    errors = []

    def worker(worker_id: int) -> None:
        try:
            for n in range(15):
                record = store.create_record(
                    RecordKind.OUTCOME,
                    RecordCreate(amount=Decimal("1.00"), category=f"w{worker_id}-{n}"),
                )
                created.append(record.id)
        except Exception as e:
            errors.append(e)

    switch_interval = sys.getswitchinterval()
    sys.setswitchinterval(1e-6)
    try:
        threads = [threading.Thread(target=worker, args=(i,)) for i in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
    finally:
        sys.setswitchinterval(switch_interval)

    assert errors == []
    assert sorted(created) == list(range(1, 91))
    stored_ids = [r.id for r in JsonFileStore(tmp_path / "data.json").list_records(RecordKind.OUTCOME)]
    assert sorted(stored_ids) == list(range(1, 91))


def test_failed_write_leaves_store_unchanged(tmp_path, monkeypatch) -> None:
    path = tmp_path / "data.json"
    store = JsonFileStore(path)
    store.create_record(
        RecordKind.INCOME,
        RecordCreate(amount=Decimal("10.00"), category="Salary", date=date(2025, 1, 1)),
    )
    on_disk_before = path.read_text()

    def fail_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", fail_replace)

    with pytest.raises(StoreUnavailable):
        store.create_record(
            RecordKind.INCOME,
            RecordCreate(amount=Decimal("5.00"), category="Gift", date=date(2025, 1, 2)),
        )
    with pytest.raises(StoreUnavailable):
        store.set_adjustment(Decimal("999.00"))

    monkeypatch.undo()

    assert [r.category for r in store.list_records(RecordKind.INCOME)] == ["Salary"]
    assert store.sum_amounts(RecordKind.INCOME) == Decimal("10.00")
    assert store.get_adjustment() is None
    assert path.read_text() == on_disk_before
    assert [p.name for p in tmp_path.iterdir()] == ["data.json"]

    retried = store.create_record(
        RecordKind.INCOME,
        RecordCreate(amount=Decimal("5.00"), category="Gift", date=date(2025, 1, 2)),
    )
    assert retried.id == 2
