"""Per-request Values — the raw request triple, the request context and the response.

Invariants:
    - These objects are created per request and are the only things the pipeline mutates
    - Definitions referenced from a Request are never modified
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from apiframe.core.api_definition import ApiDefinition
from apiframe.core.argument_set import ArgumentSet
from apiframe.core.endpoints import ControllerDefinition, EndpointDefinition


@dataclass(frozen=True)
class RawRequest:
    """What the transport hands over: method, decoded body, params and headers."""
    method: str
    body: Any = None
    params: Mapping[str, Any] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass
class Request:
    """Request context passed to authenticator and endpoint actions."""

    raw: RawRequest
    api: ApiDefinition | None = None
    controller: ControllerDefinition | None = None
    endpoint: EndpointDefinition | None = None
    arguments: ArgumentSet | None = None
    identity: Any = None
    context: dict[str, Any] = field(default_factory=dict)

    @property
    def method(self) -> str:
        return self.raw.method

    @property
    def body(self) -> Any:
        return self.raw.body

    @property
    def params(self) -> Mapping[str, Any]:
        return self.raw.params

    def header(self, name: str, default: str | None = None) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.raw.headers.items():
            if key.lower() == wanted:
                return value
        return default

    @property
    def argument_source(self) -> Any:
        """Raw argument input: the body when present, otherwise the params."""
        if self.raw.body is not None:
            return self.raw.body
        return self.raw.params if self.raw.params is not None else {}


@dataclass
class Response:
    """Mutable response built up by authenticators and actions."""

    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    fields: dict[str, Any] = field(default_factory=dict)

    def add_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def add_field(self, name: str, value: Any) -> None:
        """Set a value to be rendered through the endpoint's output fields."""
        self.fields[name] = value
