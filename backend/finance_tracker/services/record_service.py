"""
CRUD operations on income and outcome records.
Input is validated here, before the store is touched.
"""
from typing import List, Optional, Union

from finance_tracker.schemas import Record, RecordCreate, RecordKind, RecordUpdate
from finance_tracker.services.periods import scope_bounds, validate_scope
from finance_tracker.services.validation import parse_input
from finance_tracker.stores.base import RecordStore


class RecordService:

    def __init__(self, store: RecordStore):
        self.store = store

    def list_records(
        self,
        kind: RecordKind,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> List[Record]:
        """Records of the given calendar month when both month and year are set, else all."""
        validate_scope(month, year)
        start, end = scope_bounds(month, year)
        return self.store.list_records(kind, start, end)

    def get_record(self, kind: RecordKind, record_id: int) -> Record:
        return self.store.get_record(kind, record_id)

    def create_record(self, kind: RecordKind, data: Union[RecordCreate, dict]) -> Record:
        payload = parse_input(RecordCreate, data)
        return self.store.create_record(kind, payload)

    def update_record(
        self, kind: RecordKind, record_id: int, patch: Union[RecordUpdate, dict]
    ) -> Record:
        """Apply only the fields present in patch; an empty patch returns the record unchanged."""
        changes = parse_input(RecordUpdate, patch).model_dump(exclude_unset=True)
        if not changes:
            return self.store.get_record(kind, record_id)
        return self.store.update_record(kind, record_id, changes)

    def delete_record(self, kind: RecordKind, record_id: int) -> None:
        self.store.delete_record(kind, record_id)
