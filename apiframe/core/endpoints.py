"""Endpoints & Controllers — action metadata and the groups that own them."""

from dataclasses import dataclass, field
from typing import Any, Callable

from apiframe.core.arguments import ArgumentSetDefinition
from apiframe.core.authenticators import AuthenticatorDefinition
from apiframe.core.definition_map import DefinitionMap
from apiframe.core.error_definitions import ErrorDefinition
from apiframe.core.fields import FieldSet
from apiframe.core.naming import validate_name

HTTP_METHODS = frozenset({"get", "post", "put", "patch", "delete"})

# Stands in for "no argument set given"; an explicit None means an unresolved reference.
_INLINE_ARGUMENTS: Any = object()


def _validate_authenticator(definition, errors) -> None:
    authenticator = definition.authenticator
    if authenticator is not None and not isinstance(authenticator, AuthenticatorDefinition):
        errors.add(
            definition, "InvalidAuthenticator",
            "The authenticator must be an authenticator definition",
        )


@dataclass(frozen=True, eq=False)
class EndpointDefinition:
    """One executable action with its input arguments and output fields."""

    id: str
    name: str | None = None
    description: str | None = None
    http_method: str = "get"
    argument_set: ArgumentSetDefinition | None = _INLINE_ARGUMENTS
    fields: FieldSet = field(default_factory=FieldSet)
    action: Callable[[Any, Any], Any] | None = None
    authenticator: AuthenticatorDefinition | None = None
    potential_errors: tuple[ErrorDefinition, ...] = ()
    schema: bool = True

    def __post_init__(self):
        object.__setattr__(self, "potential_errors", tuple(self.potential_errors))
        if self.argument_set is _INLINE_ARGUMENTS:
            object.__setattr__(
                self, "argument_set", ArgumentSetDefinition(id=f"{self.id}/Arguments"),
            )

    def collate_objects(self, objects) -> None:
        objects.add(self.argument_set)
        self.fields.collate_objects(objects)
        objects.add(self.authenticator)
        for error in self.potential_errors:
            objects.add(error)

    def validate(self, errors) -> None:
        validate_name(self, errors, "endpoint")
        if self.action is None:
            errors.add(self, "MissingAction", "An action must be defined for endpoints")
        elif not callable(self.action):
            errors.add(self, "InvalidAction", "The action provided must be callable")

        if not isinstance(self.http_method, str) or self.http_method.lower() not in HTTP_METHODS:
            errors.add(
                self, "InvalidHTTPMethod",
                f"The HTTP method must be one of {', '.join(sorted(HTTP_METHODS))} "
                f"(was: {self.http_method!r})",
            )

        if self.argument_set is None:
            errors.add(
                self, "MissingArgumentSet",
                "The argument set for this endpoint could not be resolved",
            )
        elif not isinstance(self.argument_set, ArgumentSetDefinition):
            errors.add(
                self, "InvalidArgumentSet", "The argument set must be an argument set definition",
            )

        _validate_authenticator(self, errors)
        for index, error in enumerate(self.potential_errors):
            if not isinstance(error, ErrorDefinition):
                errors.add(
                    self, "InvalidPotentialError",
                    f"Potential error at index {index} must be an error definition",
                )
        self.fields.validate(errors)


@dataclass(frozen=True, eq=False)
class ControllerDefinition:
    """A named group of endpoints sharing an optional authenticator."""

    id: str
    name: str | None = None
    description: str | None = None
    endpoints: DefinitionMap = field(default_factory=DefinitionMap)
    authenticator: AuthenticatorDefinition | None = None
    schema: bool = True

    def collate_objects(self, objects) -> None:
        objects.add(self.authenticator)
        for endpoint in self.endpoints.values():
            objects.add(endpoint)

    def validate(self, errors) -> None:
        if not self.id:
            errors.add(self, "MissingID", "An ID must be defined for controllers")
        _validate_authenticator(self, errors)
        for name, endpoint in self.endpoints.items():
            if not isinstance(endpoint, EndpointDefinition):
                errors.add(
                    self, "InvalidEndpoint", f"Endpoint '{name}' must be an endpoint definition",
                )
