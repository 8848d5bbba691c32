"""API Definition — the root of a schema: controllers, route table and default authenticator.

Invariants:
    - Every route names a controller owned by this API and an endpoint on that controller
    - Routes are data only; matching URLs against them is the transport's job
"""

from dataclasses import dataclass, field

from apiframe.core.authenticators import AuthenticatorDefinition
from apiframe.core.definition_map import DefinitionMap
from apiframe.core.endpoints import HTTP_METHODS, ControllerDefinition, EndpointDefinition


@dataclass(frozen=True)
class Route:
    """One route-table entry: ``method /path`` → controller endpoint."""

    method: str
    path: str
    controller: ControllerDefinition
    endpoint: str

    @property
    def endpoint_definition(self) -> EndpointDefinition | None:
        return self.controller.endpoints.get(self.endpoint)


@dataclass(frozen=True, eq=False)
class ApiDefinition:
    """The whole API surface."""

    id: str
    name: str | None = None
    description: str | None = None
    authenticator: AuthenticatorDefinition | None = None
    controllers: DefinitionMap = field(default_factory=DefinitionMap)
    routes: tuple[Route, ...] = ()
    schema: bool = True

    def __post_init__(self):
        object.__setattr__(self, "routes", tuple(self.routes))

    def collate_objects(self, objects) -> None:
        objects.add(self.authenticator)
        for controller in self.controllers.values():
            objects.add(controller)
        for route in self.routes:
            objects.add(route.controller)

    def validate(self, errors) -> None:
        if not self.id:
            errors.add(self, "MissingID", "An ID must be defined for APIs")
        if self.authenticator is not None and not isinstance(
            self.authenticator, AuthenticatorDefinition,
        ):
            errors.add(
                self, "InvalidAuthenticator",
                "The authenticator must be an authenticator definition",
            )
        owned = set(map(id, self.controllers.values()))
        for route in self.routes:
            label = f"{route.method.upper()} {route.path}"
            if route.method.lower() not in HTTP_METHODS:
                errors.add(self, "InvalidRoute", f"Route '{label}' has an invalid HTTP method")
            if id(route.controller) not in owned:
                errors.add(
                    self, "InvalidRoute",
                    f"Route '{label}' references a controller not owned by this API",
                )
            if route.endpoint_definition is None:
                errors.add(
                    self, "InvalidRoute",
                    f"Route '{label}' references missing endpoint '{route.endpoint}'",
                )
