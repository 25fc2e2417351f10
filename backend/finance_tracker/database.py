"""
Database configuration using SQLAlchemy.

The engine is a process-wide handle: created lazily on first use and disposed
when the application shuts down. Request handlers open sessions through
get_session_factory (see dependencies.get_stores).
"""
import logging
import os
from typing import Optional
from urllib.parse import urlparse

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from finance_tracker.config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def _is_production_environment() -> bool:
    production_markers = {"production", "prod", "1", "true", "yes"}
    for env_var in ("ENVIRONMENT", "APP_ENV", "NODE_ENV"):
        value = os.getenv(env_var, "").strip().lower()
        if value in production_markers:
            return True
    return False


def _database_url_requires_ssl(database_url: str) -> bool:
    lowered = database_url.lower()
    return (
        "ssl=true" in lowered
        or "sslmode=require" in lowered
        or "sslmode=verify-ca" in lowered
        or "sslmode=verify-full" in lowered
    )


def _should_enforce_database_ssl(database_url: str) -> bool:
    # Local Docker networks usually run without TLS.
    local_hosts = {"localhost", "127.0.0.1", "postgres", "db"}
    hostname = (urlparse(database_url).hostname or "").lower()
    return hostname not in local_hosts


def create_db_engine(db_url: str) -> Engine:
    """
    Build an engine for the given URL.

    SQLite gets a single shared connection for in-memory databases so every
    session sees the same data; PostgreSQL gets a small pre-pinged pool.
    """
    if db_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(db_url, **kwargs)

    if (
        _is_production_environment()
        and _should_enforce_database_ssl(db_url)
        and not _database_url_requires_ssl(db_url)
    ):
        raise ValueError(
            "Production DATABASE_URL must require TLS. "
            "Use one of: '?sslmode=require', '?sslmode=verify-ca', '?sslmode=verify-full', or '?ssl=true'."
        )

    return create_engine(
        db_url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=10,
        max_overflow=20,
        echo=False,
    )


def get_engine() -> Engine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        db_url = get_settings().database_url
        _engine = create_db_engine(db_url)
        logger.info(f"[DB] Engine created for {_engine.url.render_as_string(hide_password=True)}")
    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _session_factory


def dispose_engine() -> None:
    """Release pooled connections and forget the engine."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
        logger.info("[DB] Engine disposed")
    _engine = None
    _session_factory = None


def create_tables(engine: Optional[Engine] = None) -> None:
    # registers the tables on Base.metadata
    from finance_tracker import models  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())

