"""
Shared fixtures: an in-memory SQLite database and a temporary JSON data file.
"""
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_BACKEND"] = "sql"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["AUTO_CREATE_TABLES"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from finance_tracker import models  # noqa: E402,F401
from finance_tracker.database import Base, create_db_engine  # noqa: E402
from finance_tracker.dependencies import StoreSet, get_stores  # noqa: E402
from finance_tracker.main import app  # noqa: E402
from finance_tracker.stores.json_store import JsonFileStore  # noqa: E402
from finance_tracker.stores.sql_store import (  # noqa: E402
    SqlAdjustmentStore,
    SqlBudgetStore,
    SqlRecordStore,
)


def _sql_store_set(session) -> StoreSet:
    return StoreSet(
        records=SqlRecordStore(session),
        adjustments=SqlAdjustmentStore(session),
        budgets=SqlBudgetStore(session),
    )


@pytest.fixture
def db_session():
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def sql_stores(db_session) -> StoreSet:
    return _sql_store_set(db_session)


@pytest.fixture
def json_stores(tmp_path) -> StoreSet:
    store = JsonFileStore(tmp_path / "data.json")
    return StoreSet(records=store, adjustments=store, budgets=store)


@pytest.fixture(params=["sql", "json"])
def stores(request) -> StoreSet:
    """Runs the test once per storage backend."""
    return request.getfixturevalue(f"{request.param}_stores")


@pytest.fixture
def unavailable_stores():
    """SQL stores on a database without tables, so every query fails."""
    engine = create_db_engine("sqlite://")
    session = sessionmaker(bind=engine)()
    try:
        yield _sql_store_set(session)
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(stores):
    app.dependency_overrides[get_stores] = lambda: stores
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
