"""Schema Document Models — Pydantic models for the introspection document.

Invariants:
    - Every object record carries kind, id, name and description
    - Type references are ids (never nested definitions), so cyclic types render flat
    - objects is a discriminated union on `kind`

Design Decisions:
    - Literal kinds with a discriminator: Pydantic validates the record shape per kind
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class FieldSchema(BaseModel):
    name: str | None
    description: str | None = None
    type: str | None
    array: bool = False
    null: bool = False


class ArgumentSchema(BaseModel):
    name: str | None
    description: str | None = None
    type: str | None
    array: bool = False
    required: bool = False
    validations: list[str] = Field(default_factory=list)


class EnumValueSchema(BaseModel):
    name: str
    description: str | None = None


class RouteSchema(BaseModel):
    method: str
    path: str
    controller: str
    endpoint: str


class _ObjectRecord(BaseModel):
    id: str
    name: str | None = None
    description: str | None = None


class ScalarSchema(_ObjectRecord):
    kind: Literal["scalar"] = "scalar"


class EnumSchema(_ObjectRecord):
    kind: Literal["enum"] = "enum"
    values: list[EnumValueSchema] = Field(default_factory=list)


class ObjectTypeSchema(_ObjectRecord):
    kind: Literal["object"] = "object"
    fields: list[FieldSchema] = Field(default_factory=list)


class ArgumentSetSchema(_ObjectRecord):
    kind: Literal["argument_set"] = "argument_set"
    arguments: list[ArgumentSchema] = Field(default_factory=list)


class ErrorSchema(_ObjectRecord):
    kind: Literal["error"] = "error"
    code: str | None = None
    http_status: int = 500
    fields: list[FieldSchema] = Field(default_factory=list)


class AuthenticatorSchema(_ObjectRecord):
    kind: Literal["authenticator"] = "authenticator"
    type: str | None = None
    potential_errors: list[str] = Field(default_factory=list)


class EndpointSchema(_ObjectRecord):
    kind: Literal["endpoint"] = "endpoint"
    http_method: str
    argument_set: str | None = None
    fields: list[FieldSchema] = Field(default_factory=list)
    authenticator: str | None = None
    potential_errors: list[str] = Field(default_factory=list)


class ControllerSchema(_ObjectRecord):
    kind: Literal["controller"] = "controller"
    authenticator: str | None = None
    endpoints: dict[str, str] = Field(default_factory=dict)


class ApiSchema(_ObjectRecord):
    kind: Literal["api"] = "api"
    authenticator: str | None = None
    controllers: dict[str, str] = Field(default_factory=dict)
    routes: list[RouteSchema] = Field(default_factory=list)


ObjectSchema = Annotated[
    Union[
        ScalarSchema, EnumSchema, ObjectTypeSchema, ArgumentSetSchema, ErrorSchema,
        AuthenticatorSchema, EndpointSchema, ControllerSchema, ApiSchema,
    ],
    Field(discriminator="kind"),
]


class SchemaDocument(BaseModel):
    """The full schema document exposed to documentation/codegen consumers."""
    schema_version: int = 1
    host: str
    namespace: str
    api: str
    objects: list[ObjectSchema] = Field(default_factory=list)
