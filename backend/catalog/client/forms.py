"""Form state bound to a validation schema."""
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type

from pydantic import BaseModel

from catalog.validation import validate_input


class FormState:
    """Current values, last known-good defaults and field errors of one form.

    Every field always holds a value (``None`` for empty optional fields), so
    the values can be handed to the schema as-is.
    """

    def __init__(self, schema: Type[BaseModel], defaults: Mapping[str, Any], fields: Optional[Iterable[str]] = None):
        self.schema = schema
        self.fields = tuple(fields) if fields is not None else tuple(defaults.keys())
        self.defaults: Dict[str, Any] = {f: defaults.get(f) for f in self.fields}
        self.values: Dict[str, Any] = dict(self.defaults)
        self.errors: Dict[str, List[str]] = {}

    @property
    def dirty(self) -> bool:
        return self.values != self.defaults

    def set_value(self, field: str, value: Any) -> None:
        if field not in self.fields:
            raise KeyError(f"Unknown form field: {field}")
        self.values[field] = value
        self.errors.pop(field, None)

    def validate(self) -> Optional[BaseModel]:
        """Return the normalized model, or None with ``errors`` filled in."""
        outcome = validate_input(self.schema, self.values)
        self.errors = outcome.errors
        return outcome.value

    def reset(self, values: Optional[Mapping[str, Any]] = None) -> None:
        """Drop edits; with ``values``, those become the new defaults first."""
        if values is not None:
            self.defaults = {f: values.get(f) for f in self.fields}
        self.values = dict(self.defaults)
        self.errors = {}
