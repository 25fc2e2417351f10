"""
Seed script to populate an empty store with demo data.

Usage:
  cd backend
  python scripts/seed_data.py                    # configured backend (STORAGE_BACKEND)
  python scripts/seed_data.py --backend json --data-file data.json

Creates one salary income and two expenses (rent, groceries) in the current month.
Does nothing when the store already has records.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from finance_tracker.config import get_settings
from finance_tracker.database import create_tables, dispose_engine, get_session_factory
from finance_tracker.services.seed_service import seed_demo_data
from finance_tracker.stores.json_store import JsonFileStore
from finance_tracker.stores.sql_store import SqlRecordStore


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Seed demo income and expenses.")
    parser.add_argument("--backend", choices=["sql", "json"], default=settings.storage_backend)
    parser.add_argument("--data-file", type=Path, default=settings.data_file)
    args = parser.parse_args(argv)

    if args.backend == "json":
        created = seed_demo_data(JsonFileStore(args.data_file))
        print(f"Seeded {created} records into {args.data_file}")
        return 0

    create_tables()
    db = get_session_factory()()
    try:
        created = seed_demo_data(SqlRecordStore(db))
    finally:
        db.close()
        dispose_engine()
    print(f"Seeded {created} records into the database")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
