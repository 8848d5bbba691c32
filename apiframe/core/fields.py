"""Fields & Objects — output slots and the object types that group them.

Invariants:
    - FieldSet.generate_hash(source) returns a JSON-compatible dict keyed by field name
    - A None value for a non-null field raises NullFieldValueError
    - An array field only accepts a list or tuple (InvalidArrayValueError otherwise)
    - Object-typed fields recurse through the object's own FieldSet
    - A field's backend (if any) is the only way its value is read off the source

Design Decisions:
    - Default accessor reads mappings by key and other objects by attribute, so
      actions can hand back either dicts or domain objects
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

from apiframe.core.definition_map import DefinitionMap
from apiframe.core.enums import EnumDefinition
from apiframe.core.errors import ApiRuntimeError, InvalidArrayValueError, NullFieldValueError
from apiframe.core.naming import validate_name
from apiframe.core.scalars import ScalarDefinition


@dataclass(frozen=True, eq=False)
class FieldDefinition:
    """A named, typed output slot."""

    name: str | None
    type: Any = None
    null: bool = False
    array: bool = False
    description: str | None = None
    backend: Callable[[Any], Any] | None = None

    def raw_value(self, source: Any) -> Any:
        if self.backend is not None:
            return self.backend(source)
        if isinstance(source, Mapping):
            return source.get(self.name)
        return getattr(source, self.name, None)

    def value(self, source: Any) -> Any:
        """Read and serialize this field's value from ``source``."""
        raw = self.raw_value(source)
        if raw is None:
            if self.null:
                return None
            raise NullFieldValueError(self)
        if self.array:
            if not isinstance(raw, (list, tuple)):
                raise InvalidArrayValueError(self, raw)
            return [self._serialize(item) for item in raw]
        return self._serialize(raw)

    def _serialize(self, value: Any) -> Any:
        if isinstance(self.type, ObjectDefinition):
            return self.type.fields.generate_hash(value)
        if isinstance(self.type, (ScalarDefinition, EnumDefinition)):
            return self.type.cast_value(value)
        raise ApiRuntimeError(f"Field '{self.name}' does not have a valid type")

    def validate(self, errors) -> None:
        validate_name(self, errors, "field")
        if self.type is None:
            errors.add(self, "MissingType", "A type must be defined for fields")
        elif not isinstance(self.type, (ScalarDefinition, EnumDefinition, ObjectDefinition)):
            errors.add(
                self, "InvalidType",
                "The type for fields must be a scalar, enum or object",
            )
        if self.backend is not None and not callable(self.backend):
            errors.add(self, "InvalidBackend", "The backend for fields must be callable")


class FieldSet(DefinitionMap):
    """Ordered set of fields that knows how to render a source object."""

    def generate_hash(self, source: Any) -> dict[str, Any]:
        return {name: definition.value(source) for name, definition in self.items()}

    def collate_objects(self, objects) -> None:
        for definition in self.values():
            objects.add(definition.type)

    def validate(self, errors) -> None:
        for definition in self.values():
            definition.validate(errors)


@dataclass(frozen=True, eq=False)
class ObjectDefinition:
    """An object type: a named field set used for output."""

    id: str
    name: str | None = None
    description: str | None = None
    fields: FieldSet = field(default_factory=FieldSet)
    schema: bool = True

    def collate_objects(self, objects) -> None:
        self.fields.collate_objects(objects)

    def validate(self, errors) -> None:
        if not self.id:
            errors.add(self, "MissingID", "An ID must be defined for objects")
        self.fields.validate(errors)
