"""
Error types raised by the stores and services.
The HTTP layer maps them to status codes in main.py.
"""
from typing import Optional


class FinanceTrackerError(Exception):
    """Base class for all tracker errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FinanceTrackerError):
    """Malformed or out-of-range input. Raised before any store mutation."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        payload = {"message": self.message}
        if self.field:
            payload["field"] = self.field
        return payload


class NotFoundError(FinanceTrackerError):
    """An update or lookup referenced an unknown id."""

    def __init__(self, kind: str, record_id: int):
        super().__init__(f"{kind.capitalize()} not found")
        self.kind = kind
        self.record_id = record_id


class StoreUnavailable(FinanceTrackerError):
    """The backing store could not be reached or read."""
