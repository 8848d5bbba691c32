"""Arguments & Argument Sets — typed input slots and the composite types that hold them.

Invariants:
    - An argument's type is a ScalarDefinition, EnumDefinition or ArgumentSetDefinition
      once resolved; an unresolved type is None and is reported at validation time
    - validate_value() runs every validation and returns the names of those that failed
    - Argument names are unique within their argument set
"""

from dataclasses import dataclass, field
from typing import Any, Callable

from apiframe.core.definition_map import DefinitionMap
from apiframe.core.enums import EnumDefinition
from apiframe.core.naming import validate_name
from apiframe.core.scalars import ScalarDefinition


@dataclass(frozen=True)
class Validation:
    """A named predicate run against an argument's final value."""
    name: str
    predicate: Callable[[Any], bool]


@dataclass(frozen=True, eq=False)
class ArgumentDefinition:
    """A named, typed input slot."""

    name: str | None
    type: Any = None
    required: bool = False
    array: bool = False
    description: str | None = None
    validations: tuple[Validation, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "validations", tuple(self.validations))

    def validate_value(self, value: Any) -> list[str]:
        return [
            validation.name
            for validation in self.validations
            if not validation.predicate(value)
        ]

    def validate(self, errors) -> None:
        validate_name(self, errors, "argument")
        if self.type is None:
            errors.add(self, "MissingType", "A type must be defined for arguments")
        elif not isinstance(
            self.type, (ScalarDefinition, EnumDefinition, ArgumentSetDefinition),
        ):
            errors.add(
                self, "InvalidType",
                "The type for arguments must be a scalar, enum or argument set",
            )
        for index, validation in enumerate(self.validations):
            if not callable(validation.predicate):
                errors.add(
                    self, "InvalidValidation",
                    f"Validation at index {index} ('{validation.name}') must be callable",
                )


@dataclass(frozen=True, eq=False)
class ArgumentSetDefinition:
    """A composite input type; instances are built by build_argument_set()."""

    id: str
    name: str | None = None
    description: str | None = None
    arguments: DefinitionMap = field(default_factory=DefinitionMap)
    schema: bool = True

    def collate_objects(self, objects) -> None:
        for argument in self.arguments.values():
            objects.add(argument.type)

    def validate(self, errors) -> None:
        if not self.id:
            errors.add(self, "MissingID", "An ID must be defined for argument sets")
        for argument in self.arguments.values():
            argument.validate(errors)
