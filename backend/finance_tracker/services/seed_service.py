"""
Demo data for a fresh installation.
"""
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from finance_tracker.schemas import RecordCreate, RecordKind
from finance_tracker.stores.base import RecordStore

logger = logging.getLogger(__name__)

DEMO_INCOME = [
    (1, Decimal("5000.00"), "Salary", "Monthly Salary"),
]
DEMO_OUTCOME = [
    (5, Decimal("1200.00"), "Rent", "Apartment Rent"),
    (10, Decimal("450.00"), "Groceries", "Weekly groceries"),
]


def seed_demo_data(store: RecordStore, today: Optional[date] = None) -> int:
    """
    Create a salary, rent and grocery entry in the current month when the store is empty.

    Returns:
        Number of records created (0 when the store already had data).
    """
    if store.list_records(RecordKind.INCOME) or store.list_records(RecordKind.OUTCOME):
        logger.info("[SEED] Store already has records, skipping demo data")
        return 0

    today = today or datetime.now(timezone.utc).date()
    created = 0
    for kind, entries in ((RecordKind.INCOME, DEMO_INCOME), (RecordKind.OUTCOME, DEMO_OUTCOME)):
        for day, amount, category, description in entries:
            store.create_record(
                kind,
                RecordCreate(
                    amount=amount,
                    category=category,
                    date=today.replace(day=day),
                    description=description,
                ),
            )
            created += 1

    logger.info(f"[SEED] Created {created} demo records for {today:%Y-%m}")
    return created
