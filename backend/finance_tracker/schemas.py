from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from finance_tracker.services.periods import MAX_YEAR, MIN_YEAR, to_utc_midnight

Category = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
PositiveAmount = Annotated[Decimal, Field(gt=0, max_digits=10, decimal_places=2)]
Month = Annotated[int, Field(ge=1, le=12)]
Year = Annotated[int, Field(ge=MIN_YEAR, le=MAX_YEAR)]
RecordDate = Union[datetime, date]


class RecordKind(str, Enum):
    INCOME = "income"
    OUTCOME = "outcome"


# Record Schemas
class RecordCreate(BaseModel):
    amount: PositiveAmount
    category: Category
    date: Optional[RecordDate] = None  # defaults to today (UTC)
    description: Optional[str] = None

    @field_validator("date", mode="after")
    @classmethod
    def _truncate_date(cls, value):
        if value is None:
            return None
        return to_utc_midnight(value)


class RecordUpdate(BaseModel):
    """
    Partial update. Only fields present in the request body are applied;
    use model_dump(exclude_unset=True) to get them.
    """
    amount: Optional[PositiveAmount] = None
    category: Optional[Category] = None
    date: Optional[RecordDate] = None
    description: Optional[str] = None

    @field_validator("amount", "category", "date", mode="before")
    @classmethod
    def _reject_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value

    @field_validator("date", mode="after")
    @classmethod
    def _truncate_date(cls, value):
        return to_utc_midnight(value)


class Record(BaseModel):
    id: int
    amount: Decimal
    category: str
    date: datetime
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# Balance Adjustment Schemas
class AdjustBalanceRequest(BaseModel):
    amount: Annotated[Decimal, Field(max_digits=12, decimal_places=2)]
    month: Optional[Month] = None
    year: Optional[Year] = None


class AdjustmentCheckpoint(BaseModel):
    month: int
    year: int
    amount: Decimal


class SuccessResponse(BaseModel):
    success: bool = True


# Analytics Schemas
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FinancialSummary(CamelModel):
    total_income: float
    total_expenses: float
    net_balance: float
    savings_rate: float
    manual_adjustment: float


class CategoryBreakdown(CamelModel):
    category: str
    amount: float
    percentage: float


# Budget Schemas
class BudgetCreate(BaseModel):
    category: Category
    limit: PositiveAmount
    period: Literal["monthly"] = "monthly"


class Budget(BaseModel):
    id: int
    category: str
    limit: Decimal
    period: str

    model_config = ConfigDict(from_attributes=True)


class BudgetStatus(CamelModel):
    id: int
    category: str
    limit: float
    period: str
    spent: float
    remaining: float
    percentage: float
    is_over_budget: bool
