"""Type Registry — named scalars, enums, objects, argument sets and errors for one schema.

Invariants:
    - Built-in scalars are registered up front under their ids ("string", "integer", ...)
    - Ids are unique; registering after freeze() raises DefinitionError
    - Symbolic type references are resolved once, inside freeze()/build(), never per request
    - Unknown references resolve to None (reported later as MissingType)

Design Decisions:
    - Two phases: builders append specs while the registry is open, freeze() creates
      every field/argument in one pass, so forward and self references both work
"""

from typing import Any

from apiframe.core.arguments import ArgumentSetDefinition
from apiframe.core.builders import ArgumentSetBuilder, ErrorBuilder, ObjectBuilder
from apiframe.core.enums import EnumDefinition
from apiframe.core.error_definitions import ErrorDefinition
from apiframe.core.errors import DefinitionError
from apiframe.core.fields import ObjectDefinition
from apiframe.core.scalars import BUILTIN_SCALARS, ScalarDefinition

_BUILDER_TYPES = (ObjectBuilder, ArgumentSetBuilder, ErrorBuilder)


class TypeRegistry:
    """Registry of reusable types, shared by every endpoint built against it."""

    def __init__(self, include_builtins: bool = True):
        self._types: dict[str, Any] = dict(BUILTIN_SCALARS) if include_builtins else {}
        self._builders: list = []
        self._frozen = False

    # --- Registration ---------------------------------------------------------

    def register(self, definition: Any) -> Any:
        if self._frozen:
            raise DefinitionError(f"Cannot register '{definition.id}': registry is frozen")
        if definition.id in self._types:
            raise DefinitionError(f"'{definition.id}' is already registered")
        self._types[definition.id] = definition
        return definition

    def scalar(self, id: str, **kwargs: Any) -> ScalarDefinition:
        return self.register(ScalarDefinition(id=id, **kwargs))

    def enum(self, id: str, values, **kwargs: Any) -> EnumDefinition:
        return self.register(EnumDefinition(id=id, values=tuple(values), **kwargs))

    def object(
        self, id: str, name: str | None = None, description: str | None = None,
        schema: bool = True,
    ) -> ObjectBuilder:
        builder = ObjectBuilder(ObjectDefinition(
            id=id, name=name or id, description=description, schema=schema,
        ))
        return self._track(builder)

    def argument_set(
        self, id: str, name: str | None = None, description: str | None = None,
        schema: bool = True,
    ) -> ArgumentSetBuilder:
        builder = ArgumentSetBuilder(ArgumentSetDefinition(
            id=id, name=name or id, description=description, schema=schema,
        ))
        return self._track(builder)

    def error(
        self, id: str, code: str, description: str | None = None,
        http_status: int = 500, name: str | None = None, schema: bool = True,
    ) -> ErrorBuilder:
        builder = ErrorBuilder(ErrorDefinition(
            id=id, code=code, description=description, http_status=http_status,
            name=name or id, schema=schema,
        ))
        return self._track(builder)

    def _track(self, builder):
        self.register(builder.definition)
        self._builders.append(builder)
        return builder

    # --- Lookup ---------------------------------------------------------------

    def get(self, id: str) -> Any:
        return self._types.get(id)

    def __contains__(self, id: object) -> bool:
        return id in self._types

    def resolve(self, ref: Any) -> tuple[Any, bool]:
        """Resolve a type reference to ``(definition, is_array)``.

        ``ref`` may be a definition, a builder, a registered id, or a
        one-element list of any of those (meaning "array of").
        """
        if isinstance(ref, (list, tuple)):
            if len(ref) != 1:
                return None, True
            definition, _ = self.resolve(ref[0])
            return definition, True
        if isinstance(ref, _BUILDER_TYPES):
            return ref.definition, False
        if isinstance(ref, str):
            return self._types.get(ref), False
        return ref, False

    # --- Freezing -------------------------------------------------------------

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Resolve every pending builder. Idempotent."""
        if self._frozen:
            return
        for builder in self._builders:
            builder.finalize(self)
        self._frozen = True
