"""Enums — named leaf types whose values form a closed, ordered set of strings."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from apiframe.core.errors import InvalidEnumValueError


@dataclass(frozen=True, eq=False)
class EnumDefinition:
    """A value is valid iff it is one of ``values``."""

    id: str
    values: tuple[str, ...] = ()
    name: str | None = None
    description: str | None = None
    value_descriptions: Mapping[str, str] = field(default_factory=dict)
    schema: bool = True

    def __post_init__(self):
        object.__setattr__(self, "values", tuple(self.values))
        object.__setattr__(
            self, "value_descriptions", MappingProxyType(dict(self.value_descriptions)),
        )

    def is_valid(self, value: Any) -> bool:
        return isinstance(value, str) and value in self.values

    def cast_value(self, value: Any) -> str:
        if not self.is_valid(value):
            raise InvalidEnumValueError(self, value)
        return value

    def collate_objects(self, objects) -> None:
        """Enums reference nothing."""

    def validate(self, errors) -> None:
        if not self.id:
            errors.add(self, "MissingID", "An ID must be defined for enums")
        seen: set[str] = set()
        for index, value in enumerate(self.values):
            if not isinstance(value, str):
                errors.add(
                    self, "InvalidValue", f"Value at index {index} must be a string",
                )
            elif value in seen:
                errors.add(self, "DuplicateValue", f"Value '{value}' is defined more than once")
            else:
                seen.add(value)
