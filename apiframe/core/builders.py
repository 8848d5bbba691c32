"""Builders — append-only assembly of definitions, frozen on build.

Invariants:
    - Builders only record specs; type references are resolved by the registry at
      finalize/build time
    - After finalize()/build() a builder rejects further changes (DefinitionError)
    - Endpoint ids are "<controller id>/<endpoint name>"; inline argument sets are
      "<endpoint id>/Arguments"

Design Decisions:
    - Object, argument-set and error builders wrap an already-created definition
      "shell" so other types can reference it before its fields exist
    - action() doubles as a decorator so handlers can sit next to their endpoint
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable

from apiframe.core.api_definition import ApiDefinition, Route
from apiframe.core.arguments import ArgumentDefinition, ArgumentSetDefinition, Validation
from apiframe.core.authenticators import AuthenticatorDefinition
from apiframe.core.definition_map import DefinitionMap
from apiframe.core.endpoints import ControllerDefinition, EndpointDefinition
from apiframe.core.errors import DefinitionError
from apiframe.core.fields import FieldDefinition, FieldSet


@dataclass(frozen=True)
class _FieldSpec:
    name: str | None
    type: Any
    null: bool
    array: bool
    description: str | None
    backend: Callable[[Any], Any] | None


@dataclass(frozen=True)
class _ArgumentSpec:
    name: str | None
    type: Any
    required: bool
    array: bool
    description: str | None
    validations: tuple[Validation, ...]


def _validations(validations: Any) -> tuple[Validation, ...]:
    if validations is None:
        return ()
    if isinstance(validations, Mapping):
        return tuple(Validation(name, predicate) for name, predicate in validations.items())
    return tuple(validations)


class _Assembly:
    """Shared open/closed bookkeeping plus field and argument specs."""

    def __init__(self):
        self._closed = False
        self._field_specs: list[_FieldSpec] = []
        self._argument_specs: list[_ArgumentSpec] = []

    def _ensure_open(self) -> None:
        if self._closed:
            raise DefinitionError(f"{type(self).__name__} has already been built")

    def _close(self) -> None:
        self._ensure_open()
        self._closed = True

    def _add_field(self, name, type, null, array, description, backend) -> None:
        self._ensure_open()
        if any(spec.name == name for spec in self._field_specs):
            raise DefinitionError(f"Field '{name}' is already defined")
        self._field_specs.append(_FieldSpec(name, type, null, array, description, backend))

    def _add_argument(self, name, type, required, array, description, validations) -> None:
        self._ensure_open()
        if any(spec.name == name for spec in self._argument_specs):
            raise DefinitionError(f"Argument '{name}' is already defined")
        self._argument_specs.append(_ArgumentSpec(
            name, type, required, array, description, _validations(validations),
        ))

    def _fill_fields(self, field_set: FieldSet, registry) -> FieldSet:
        for spec in self._field_specs:
            resolved, is_array = registry.resolve(spec.type)
            field_set.attach(spec.name, FieldDefinition(
                name=spec.name, type=resolved, null=spec.null,
                array=spec.array or is_array, description=spec.description,
                backend=spec.backend,
            ))
        field_set.freeze()
        return field_set

    def _fill_arguments(self, arguments: DefinitionMap, registry) -> DefinitionMap:
        for spec in self._argument_specs:
            resolved, is_array = registry.resolve(spec.type)
            arguments.attach(spec.name, ArgumentDefinition(
                name=spec.name, type=resolved, required=spec.required,
                array=spec.array or is_array, description=spec.description,
                validations=spec.validations,
            ))
        arguments.freeze()
        return arguments


# ─── Type Builders ──────────────────────────────────────────────

class ObjectBuilder(_Assembly):
    """Collects fields for an ObjectDefinition registered with a TypeRegistry."""

    def __init__(self, definition):
        super().__init__()
        self.definition = definition

    def field(
        self, name: str, type: Any, *, null: bool = False, array: bool = False,
        description: str | None = None, backend: Callable[[Any], Any] | None = None,
    ) -> "ObjectBuilder":
        self._add_field(name, type, null, array, description, backend)
        return self

    def finalize(self, registry) -> None:
        self._close()
        self._fill_fields(self.definition.fields, registry)


class ErrorBuilder(ObjectBuilder):
    """Collects detail fields for an ErrorDefinition."""


class ArgumentSetBuilder(_Assembly):
    """Collects arguments for an ArgumentSetDefinition."""

    def __init__(self, definition):
        super().__init__()
        self.definition = definition

    def argument(
        self, name: str, type: Any, *, required: bool = False, array: bool = False,
        description: str | None = None, validations: Any = None,
    ) -> "ArgumentSetBuilder":
        self._add_argument(name, type, required, array, description, validations)
        return self

    def finalize(self, registry) -> None:
        self._close()
        self._fill_arguments(self.definition.arguments, registry)


# ─── Endpoint / Controller / API Builders ───────────────────────

class EndpointBuilder(_Assembly):
    """Collects an endpoint's arguments, fields, action and errors."""

    def __init__(
        self, name: str, *, description: str | None = None, http_method: str = "get",
        action: Callable[[Any, Any], Any] | None = None,
        authenticator: AuthenticatorDefinition | None = None,
        potential_errors=(), argument_set: Any = None, schema: bool = True,
    ):
        super().__init__()
        self.name = name
        self.description = description
        self.http_method = http_method.lower() if isinstance(http_method, str) else http_method
        self._action = action
        self._authenticator = authenticator
        self._potential_errors = list(potential_errors)
        self._argument_set = argument_set
        self._schema = schema

    def argument(
        self, name: str, type: Any, *, required: bool = False, array: bool = False,
        description: str | None = None, validations: Any = None,
    ) -> "EndpointBuilder":
        self._add_argument(name, type, required, array, description, validations)
        return self

    def field(
        self, name: str, type: Any, *, null: bool = False, array: bool = False,
        description: str | None = None, backend: Callable[[Any], Any] | None = None,
    ) -> "EndpointBuilder":
        self._add_field(name, type, null, array, description, backend)
        return self

    def action(self, fn: Callable[[Any, Any], Any]) -> Callable[[Any, Any], Any]:
        self._ensure_open()
        self._action = fn
        return fn

    def authenticator(self, authenticator: AuthenticatorDefinition) -> "EndpointBuilder":
        self._ensure_open()
        self._authenticator = authenticator
        return self

    def potential_error(self, error: Any) -> "EndpointBuilder":
        self._ensure_open()
        self._potential_errors.append(error)
        return self

    def build(self, registry, controller_id: str) -> EndpointDefinition:
        self._close()
        endpoint_id = f"{controller_id}/{self.name}"
        return EndpointDefinition(
            id=endpoint_id,
            name=self.name,
            description=self.description,
            http_method=self.http_method,
            argument_set=self._build_argument_set(registry, endpoint_id),
            fields=self._fill_fields(FieldSet(), registry),
            action=self._action,
            authenticator=self._authenticator,
            potential_errors=tuple(
                registry.resolve(error)[0] for error in self._potential_errors
            ),
            schema=self._schema,
        )

    def _build_argument_set(
        self, registry, endpoint_id: str,
    ) -> ArgumentSetDefinition | None:
        """Inline set, or the shared one (None when the reference is unknown)."""
        if self._argument_set is not None:
            if self._argument_specs:
                raise DefinitionError(
                    f"Endpoint '{endpoint_id}' cannot mix a shared argument set "
                    f"with inline arguments",
                )
            resolved, _ = registry.resolve(self._argument_set)
            return resolved
        definition = ArgumentSetDefinition(
            id=f"{endpoint_id}/Arguments", name=f"{self.name} arguments",
            schema=self._schema,
        )
        self._fill_arguments(definition.arguments, registry)
        return definition


class ControllerBuilder:
    """Collects endpoints for one controller."""

    def __init__(
        self, id: str, *, name: str | None = None, description: str | None = None,
        authenticator: AuthenticatorDefinition | None = None, schema: bool = True,
    ):
        self.id = id
        self.name = name or id
        self.description = description
        self.authenticator = authenticator
        self.schema = schema
        self._endpoints: dict[str, EndpointBuilder] = {}
        self._built: ControllerDefinition | None = None

    def endpoint(self, name: str, **kwargs: Any) -> EndpointBuilder:
        if self._built is not None:
            raise DefinitionError(f"Controller '{self.id}' has already been built")
        if name in self._endpoints:
            raise DefinitionError(f"Endpoint '{name}' is already defined on '{self.id}'")
        builder = EndpointBuilder(name, **kwargs)
        self._endpoints[name] = builder
        return builder

    def build(self, registry) -> ControllerDefinition:
        """Build once; later calls return the same definition."""
        if self._built is None:
            registry.freeze()
            endpoints = DefinitionMap({
                name: builder.build(registry, self.id)
                for name, builder in self._endpoints.items()
            })
            self._built = ControllerDefinition(
                id=self.id, name=self.name, description=self.description,
                endpoints=endpoints, authenticator=self.authenticator, schema=self.schema,
            )
        return self._built


class ApiBuilder:
    """Top-level builder: controllers, route table and the shared TypeRegistry."""

    def __init__(
        self, id: str, *, registry=None, name: str | None = None,
        description: str | None = None,
        authenticator: AuthenticatorDefinition | None = None, schema: bool = True,
    ):
        if registry is None:
            from apiframe.core.registry import TypeRegistry
            registry = TypeRegistry()
        self.id = id
        self.registry = registry
        self.name = name or id
        self.description = description
        self.authenticator = authenticator
        self.schema = schema
        self._controllers: dict[str, Any] = {}
        self._routes: list[tuple[str, str, Any, str]] = []
        self._built: ApiDefinition | None = None

    def controller(self, name: str, controller: Any = None, **kwargs: Any) -> Any:
        """Attach a controller (builder or definition), creating a builder if omitted."""
        self._ensure_open()
        if name in self._controllers:
            raise DefinitionError(f"Controller '{name}' is already defined on '{self.id}'")
        if controller is None:
            controller = ControllerBuilder(name, **kwargs)
        self._controllers[name] = controller
        return controller

    def route(self, method: str, path: str, *, controller: Any, endpoint: str) -> "ApiBuilder":
        self._ensure_open()
        if not isinstance(controller, str) and not any(
            existing is controller for existing in self._controllers.values()
        ):
            self.controller(controller.id, controller)
        self._routes.append((method.lower(), path.strip("/"), controller, endpoint))
        return self

    def _ensure_open(self) -> None:
        if self._built is not None:
            raise DefinitionError(f"API '{self.id}' has already been built")

    def build(self) -> ApiDefinition:
        """Freeze the registry and produce the immutable ApiDefinition."""
        if self._built is not None:
            return self._built
        self.registry.freeze()
        built: dict[str, ControllerDefinition] = {}
        for name, controller in self._controllers.items():
            built[name] = (
                controller.build(self.registry)
                if isinstance(controller, ControllerBuilder) else controller
            )
        routes = []
        for method, path, controller, endpoint in self._routes:
            routes.append(Route(
                method=method, path=path,
                controller=self._controller_for(controller, built), endpoint=endpoint,
            ))
        self._built = ApiDefinition(
            id=self.id, name=self.name, description=self.description,
            authenticator=self.authenticator, controllers=DefinitionMap(built),
            routes=tuple(routes), schema=self.schema,
        )
        return self._built

    def _controller_for(self, controller: Any, built: dict[str, ControllerDefinition]):
        if isinstance(controller, str):
            if controller not in built:
                raise DefinitionError(f"Route references unknown controller '{controller}'")
            return built[controller]
        for name, candidate in self._controllers.items():
            if candidate is controller:
                return built[name]
        raise DefinitionError(f"Route references unknown controller '{controller.id}'")
