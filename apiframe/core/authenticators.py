"""Authenticators — definitions and the endpoint → controller → API override cascade.

Invariants:
    - resolve_authenticator returns the first non-None of endpoint, controller, API
    - Lower-precedence authenticators never run when a higher one is set (override, not merge)
    - An anonymous authenticator may omit its action; it always passes
    - authenticate() never raises: a rejection is an Err carrying the raised error

Design Decisions:
    - Resolution is a pure function over definitions and is kept apart from
      authenticate(), so the executor decides when the action runs
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from apiframe.core.error_definitions import ErrorDefinition
from apiframe.core.errors import ApiRuntimeError
from apiframe.core.result import Err, Ok, Result, capture


class AuthenticatorType(str, Enum):
    """Recognized authenticator kinds."""
    BEARER = "bearer"
    ANONYMOUS = "anonymous"


@dataclass(frozen=True, eq=False)
class AuthenticatorDefinition:
    """Authenticator metadata. ``action(request, response)`` rejects by raising."""

    id: str
    type: AuthenticatorType | str | None = None
    action: Callable[[Any, Any], Any] | None = None
    potential_errors: tuple[ErrorDefinition, ...] = ()
    name: str | None = None
    description: str | None = None
    schema: bool = True

    def __post_init__(self):
        object.__setattr__(self, "potential_errors", tuple(self.potential_errors))
        if isinstance(self.type, str) and self.type in _TYPE_VALUES:
            object.__setattr__(self, "type", AuthenticatorType(self.type))

    @property
    def anonymous(self) -> bool:
        return self.type == AuthenticatorType.ANONYMOUS

    def collate_objects(self, objects) -> None:
        for error in self.potential_errors:
            objects.add(error)

    def validate(self, errors) -> None:
        if self.type is None:
            errors.add(self, "MissingType", "A type must be defined for authenticators")
        elif not isinstance(self.type, AuthenticatorType):
            errors.add(
                self, "InvalidType",
                f"The type must be one of {', '.join(sorted(_TYPE_VALUES))} "
                f"(was: {self.type!r})",
            )

        if self.action is None:
            if not self.anonymous:
                errors.add(self, "MissingAction", "An action must be defined for authenticators")
        elif not callable(self.action):
            errors.add(self, "InvalidAction", "The action provided must be callable")

        for index, error in enumerate(self.potential_errors):
            if not isinstance(error, ErrorDefinition):
                errors.add(
                    self, "InvalidPotentialError",
                    f"Potential error at index {index} must be an error definition",
                )


_TYPE_VALUES = frozenset(t.value for t in AuthenticatorType)


def resolve_authenticator(endpoint, controller, api) -> AuthenticatorDefinition | None:
    """Effective authenticator for an endpoint: endpoint, else controller, else API."""
    for owner in (endpoint, controller, api):
        if owner is not None and owner.authenticator is not None:
            return owner.authenticator
    return None


def authenticate(request, response, authenticator: AuthenticatorDefinition | None) -> Result:
    """Run ``authenticator`` against the request; Ok when it passes (or there is none)."""
    if authenticator is None:
        return Ok(None)
    if authenticator.action is None:
        if authenticator.anonymous:
            return Ok(authenticator)
        return Err(ApiRuntimeError(
            f"No action has been defined for authenticator '{authenticator.id}'",
        ))
    result = capture(authenticator.action, request, response)
    if isinstance(result, Err):
        return result
    return Ok(authenticator)
