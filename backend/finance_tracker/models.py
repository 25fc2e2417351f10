"""
SQLAlchemy models for income, outcome, balance adjustments and budgets.
"""
from datetime import datetime, timezone
from sqlalchemy import (
    Column,
    String,
    DateTime,
    Numeric,
    Text,
    Integer,
    Index,
    UniqueConstraint,
)

from finance_tracker.database import Base

GLOBAL_ADJUSTMENT_SCOPE = "global"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class RecordColumns:
    """
    Columns shared by the income and outcome tables.
    Both kinds have the same shape but independent id sequences.
    """
    id = Column(Integer, primary_key=True, autoincrement=True)
    amount = Column(Numeric(10, 2), nullable=False)
    category = Column(Text, nullable=False)
    date = Column(DateTime, nullable=False)  # UTC midnight
    description = Column(Text, nullable=True)


class Income(RecordColumns, Base):
    __tablename__ = "income"

    # sqlite_autoincrement keeps SQLite from reusing the id of a deleted last row
    __table_args__ = (
        Index("idx_income_date", "date"),
        Index("idx_income_category", "category"),
        {"sqlite_autoincrement": True},
    )


class Outcome(RecordColumns, Base):
    __tablename__ = "outcome"

    __table_args__ = (
        Index("idx_outcome_date", "date"),
        Index("idx_outcome_category", "category"),
        {"sqlite_autoincrement": True},
    )


class BalanceAdjustment(Base):
    """
    Manually entered balance target.
    scope is "global" for the single global value, or "YYYY-MM" for a monthly checkpoint.
    """
    __tablename__ = "balance_adjustments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    scope = Column(String(16), nullable=False)
    year = Column(Integer, nullable=True)
    month = Column(Integer, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        UniqueConstraint("scope", name="balance_adjustments_scope"),
        Index("idx_balance_adjustments_year_month", "year", "month"),
    )


class Budget(Base):
    """Spending limit for a category."""
    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    category = Column(Text, nullable=False)
    limit = Column("limit", Numeric(10, 2), nullable=False)
    period = Column(String(20), nullable=False, default="monthly")
    created_at = Column(DateTime, default=_utcnow)

    __table_args__ = (
        Index("idx_budgets_category", "category"),
        {"sqlite_autoincrement": True},
    )


def adjustment_scope(month=None, year=None) -> str:
    if month is None or year is None:
        return GLOBAL_ADJUSTMENT_SCOPE
    return f"{int(year):04d}-{int(month):02d}"
