"""
Script to reset the database by dropping all tables and recreating them.
WARNING: This will delete all data!

Usage:
  cd backend
  python scripts/reset_database.py --yes
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from sqlalchemy import inspect

from finance_tracker import models  # noqa: F401  (registers tables)
from finance_tracker.database import Base, dispose_engine, get_engine


def reset_database() -> list[str]:
    """Drop all tables and recreate them. Returns the created table names."""
    engine = get_engine()

    print("Dropping all existing tables...")
    Base.metadata.drop_all(bind=engine)
    print("✓ All tables dropped")

    print("\nCreating tables...")
    Base.metadata.create_all(bind=engine)

    table_names = sorted(inspect(engine).get_table_names())
    print("✓ All tables created successfully!")
    for table_name in table_names:
        print(f"  - {table_name}")
    return table_names


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Drop and recreate all finance tracker tables.")
    parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation.")
    args = parser.parse_args(argv)

    if not args.yes:
        print("⚠️  WARNING: This will delete all existing data!")
        answer = input("Type 'reset' to continue: ")
        if answer.strip() != "reset":
            print("Aborted.")
            return 1

    try:
        reset_database()
    finally:
        dispose_engine()

    print("\n✅ Database reset complete! You can now run scripts/seed_data.py")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
