"""
Input parsing shared by the services and the HTTP error handlers.
"""
from typing import Sequence, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from finance_tracker.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

REQUEST_LOCATIONS = {"body", "query", "path"}


def describe_errors(errors: Sequence[dict]) -> ValidationError:
    """Reduce pydantic error details to the first offending field and its message."""
    if not errors:
        return ValidationError("Invalid input")
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in REQUEST_LOCATIONS)
    message = first.get("msg", "Invalid input")
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return ValidationError(message, field=field or None)


def parse_input(model: Type[ModelT], data: Union[ModelT, dict]) -> ModelT:
    """Validate raw input into model, raising the tracker's ValidationError."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise describe_errors(exc.errors()) from exc
