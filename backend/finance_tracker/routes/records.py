from fastapi import APIRouter, Depends, Query, Response
from typing import List, Optional

from finance_tracker.dependencies import get_record_service
from finance_tracker.schemas import Record, RecordCreate, RecordKind, RecordUpdate
from finance_tracker.services.periods import MAX_YEAR, MIN_YEAR
from finance_tracker.services.record_service import RecordService


def build_records_router(kind: RecordKind) -> APIRouter:
    """CRUD routes for one record kind; income and outcome share the same shape."""
    router = APIRouter()

    @router.get("", response_model=List[Record])
    def list_records(
        month: Optional[int] = Query(None, ge=1, le=12),
        year: Optional[int] = Query(None, ge=MIN_YEAR, le=MAX_YEAR),
        service: RecordService = Depends(get_record_service),
    ):
        """List records, newest first. Both month and year are needed to filter."""
        return service.list_records(kind, month, year)

    @router.get("/{record_id}", response_model=Record)
    def get_record(record_id: int, service: RecordService = Depends(get_record_service)):
        return service.get_record(kind, record_id)

    @router.post("", response_model=Record, status_code=201)
    def create_record(data: RecordCreate, service: RecordService = Depends(get_record_service)):
        return service.create_record(kind, data)

    @router.patch("/{record_id}", response_model=Record)
    def update_record(
        record_id: int,
        updates: RecordUpdate,
        service: RecordService = Depends(get_record_service),
    ):
        """Update only the fields present in the body."""
        return service.update_record(kind, record_id, updates)

    @router.delete("/{record_id}", status_code=204)
    def delete_record(record_id: int, service: RecordService = Depends(get_record_service)):
        """Delete a record. Unknown ids are ignored."""
        service.delete_record(kind, record_id)
        return Response(status_code=204)

    return router
