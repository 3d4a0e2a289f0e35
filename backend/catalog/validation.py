"""Turn raw form input into a normalized schema instance or field errors."""
from typing import Any, Dict, Generic, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

FORM_ERROR_KEY = "__all__"


class ValidationOutcome(Generic[ModelT]):
    """Either ``value`` is set or ``errors`` maps field names to messages."""

    def __init__(self, value: Optional[ModelT] = None, errors: Optional[Dict[str, List[str]]] = None):
        self.value = value
        self.errors = errors or {}

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.errors

    def __repr__(self):
        return f"<ValidationOutcome(ok={self.ok}, errors={self.errors})>"


def field_errors(exc: ValidationError) -> Dict[str, List[str]]:
    """Group pydantic error entries by the top-level field they belong to."""
    errors: Dict[str, List[str]] = {}
    for entry in exc.errors():
        loc = entry.get("loc") or ()
        field = str(loc[0]) if loc else FORM_ERROR_KEY
        message = entry.get("msg", "Invalid value")
        # pydantic prefixes messages raised from validators
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, []).append(message)
    return errors


def validate_input(schema: Type[ModelT], raw: Mapping[str, Any]) -> ValidationOutcome[ModelT]:
    """Validate ``raw`` against ``schema`` without raising."""
    try:
        return ValidationOutcome(value=schema.model_validate(dict(raw)))
    except ValidationError as exc:
        return ValidationOutcome(errors=field_errors(exc))
