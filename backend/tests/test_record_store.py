"""
Record CRUD behaviour, checked against both the SQL and the JSON stores.
"""
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from finance_tracker.errors import NotFoundError, ValidationError
from finance_tracker.schemas import RecordKind
from finance_tracker.services.record_service import RecordService

INCOME = RecordKind.INCOME
OUTCOME = RecordKind.OUTCOME


@pytest.fixture
def service(stores) -> RecordService:
    return RecordService(stores.records)


def _create(service, kind, amount, category, day, description=None):
    data = {"amount": amount, "category": category, "date": day}
    if description is not None:
        data["description"] = description
    return service.create_record(kind, data)


def test_ids_are_sequential_and_independent_per_kind(service) -> None:
    first = _create(service, INCOME, "100.00", "Salary", date(2025, 1, 1))
    second = _create(service, INCOME, "50.00", "Gift", date(2025, 1, 2))
    expense = _create(service, OUTCOME, "20.00", "Food", date(2025, 1, 3))

    assert (first.id, second.id) == (1, 2)
    assert expense.id == 1


def test_deleted_ids_are_never_reused(service) -> None:
    _create(service, OUTCOME, "10.00", "Food", date(2025, 1, 1))
    last = _create(service, OUTCOME, "11.00", "Food", date(2025, 1, 2))
    service.delete_record(OUTCOME, last.id)

    created = _create(service, OUTCOME, "12.00", "Food", date(2025, 1, 3))

    assert created.id == last.id + 1


def test_create_normalizes_defaults(service) -> None:
    record = service.create_record(INCOME, {"amount": "42.50", "category": "Freelance"})

    assert record.description is None
    assert record.amount == Decimal("42.50")
    assert record.date == datetime.combine(datetime.now(timezone.utc).date(), datetime.min.time())


def test_create_truncates_date_to_utc_midnight(service) -> None:
    record = _create(service, OUTCOME, "9.99", "Coffee", "2025-03-04T18:20:00+02:00")

    assert record.date == datetime(2025, 3, 4)


def test_list_is_sorted_newest_first(service) -> None:
    _create(service, OUTCOME, "1.00", "A", date(2025, 1, 10))
    _create(service, OUTCOME, "2.00", "B", date(2025, 3, 1))
    _create(service, OUTCOME, "3.00", "C", date(2025, 2, 15))

    records = service.list_records(OUTCOME)

    assert [r.category for r in records] == ["B", "C", "A"]


def test_list_filters_to_calendar_month_only_when_month_and_year_given(service) -> None:
    _create(service, OUTCOME, "1.00", "December", date(2024, 12, 31))
    _create(service, OUTCOME, "2.00", "January", date(2025, 1, 1))
    _create(service, OUTCOME, "3.00", "LateJanuary", date(2025, 1, 31))
    _create(service, OUTCOME, "4.00", "February", date(2025, 2, 1))

    january = service.list_records(OUTCOME, month=1, year=2025)

    assert [r.category for r in january] == ["LateJanuary", "January"]
    assert len(service.list_records(OUTCOME, month=1)) == 4


def test_update_changes_only_present_fields(service) -> None:
    record = _create(service, INCOME, "100.00", "Salary", date(2025, 1, 1), "January pay")

    updated = service.update_record(INCOME, record.id, {"category": "Bonus"})

    assert updated.id == record.id
    assert updated.category == "Bonus"
    assert updated.amount == Decimal("100.00")
    assert updated.description == "January pay"
    assert service.get_record(INCOME, record.id).category == "Bonus"


def test_update_can_clear_description(service) -> None:
    record = _create(service, INCOME, "100.00", "Salary", date(2025, 1, 1), "note")

    updated = service.update_record(INCOME, record.id, {"description": None})

    assert updated.description is None


def test_update_unknown_id_raises_not_found(service) -> None:
    with pytest.raises(NotFoundError):
        service.update_record(OUTCOME, 999, {"amount": "5.00"})


def test_get_unknown_id_raises_not_found(service) -> None:
    with pytest.raises(NotFoundError):
        service.get_record(INCOME, 1)


def test_delete_unknown_id_is_a_no_op(service) -> None:
    _create(service, INCOME, "100.00", "Salary", date(2025, 1, 1))

    service.delete_record(INCOME, 42)

    assert len(service.list_records(INCOME)) == 1


@pytest.mark.parametrize(
    "data, field",
    [
        ({"amount": "0", "category": "Food"}, "amount"),
        ({"amount": "-3.00", "category": "Food"}, "amount"),
        ({"amount": "1.234", "category": "Food"}, "amount"),
        ({"amount": "10.00", "category": "   "}, "category"),
        ({"amount": "10.00"}, "category"),
    ],
)
def test_invalid_create_is_rejected_before_mutation(service, data, field) -> None:
    with pytest.raises(ValidationError) as excinfo:
        service.create_record(OUTCOME, data)

    assert excinfo.value.field == field
    assert service.list_records(OUTCOME) == []


def test_update_rejects_null_for_required_fields(service) -> None:
    record = _create(service, OUTCOME, "10.00", "Food", date(2025, 1, 1))

    with pytest.raises(ValidationError) as excinfo:
        service.update_record(OUTCOME, record.id, {"amount": None})

    assert excinfo.value.field == "amount"
    assert service.get_record(OUTCOME, record.id).amount == Decimal("10.00")
