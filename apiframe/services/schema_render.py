"""Schema Rendering — turns collated definitions into the schema document.

Invariants:
    - Every definition reachable from the API appears at most once
    - Definitions with schema=False are walked (their references still count) but not rendered
    - Output validates against SchemaDocument before it is returned

Design Decisions:
    - Explicit type → renderer dict: every definition kind's rendering visible in one place
"""

from typing import Any, Callable

from apiframe.core.api_definition import ApiDefinition
from apiframe.core.arguments import ArgumentSetDefinition
from apiframe.core.authenticators import AuthenticatorDefinition
from apiframe.core.collation import ObjectSet, collate_objects
from apiframe.core.endpoints import ControllerDefinition, EndpointDefinition
from apiframe.core.enums import EnumDefinition
from apiframe.core.error_definitions import ErrorDefinition
from apiframe.core.fields import FieldSet, ObjectDefinition
from apiframe.core.scalars import ScalarDefinition
from apiframe.schemas.schema_document import (
    ApiSchema, ArgumentSchema, ArgumentSetSchema, AuthenticatorSchema, ControllerSchema,
    EndpointSchema, EnumSchema, EnumValueSchema, ErrorSchema, FieldSchema, ObjectTypeSchema,
    RouteSchema, ScalarSchema, SchemaDocument,
)

SCHEMA_VERSION = 1


def _ref(definition: Any) -> str | None:
    return getattr(definition, "id", None) if definition is not None else None


def _refs(definitions) -> list[str]:
    """Ids of resolved definitions; unresolved references are left to validate_all."""
    return [ref for ref in map(_ref, definitions) if ref is not None]


def _fields(field_set: FieldSet) -> list[FieldSchema]:
    return [
        FieldSchema(
            name=field.name, description=field.description, type=_ref(field.type),
            array=field.array, null=field.null,
        )
        for field in field_set.values()
    ]


def _render_scalar(scalar: ScalarDefinition) -> ScalarSchema:
    return ScalarSchema(id=scalar.id, name=scalar.name, description=scalar.description)


def _render_enum(enum: EnumDefinition) -> EnumSchema:
    return EnumSchema(
        id=enum.id, name=enum.name, description=enum.description,
        values=[
            EnumValueSchema(name=value, description=enum.value_descriptions.get(value))
            for value in enum.values
        ],
    )


def _render_object(obj: ObjectDefinition) -> ObjectTypeSchema:
    return ObjectTypeSchema(
        id=obj.id, name=obj.name, description=obj.description, fields=_fields(obj.fields),
    )


def _render_argument_set(argument_set: ArgumentSetDefinition) -> ArgumentSetSchema:
    return ArgumentSetSchema(
        id=argument_set.id, name=argument_set.name, description=argument_set.description,
        arguments=[
            ArgumentSchema(
                name=argument.name, description=argument.description,
                type=_ref(argument.type), array=argument.array,
                required=argument.required,
                validations=[validation.name for validation in argument.validations],
            )
            for argument in argument_set.arguments.values()
        ],
    )


def _render_error(error: ErrorDefinition) -> ErrorSchema:
    return ErrorSchema(
        id=error.id, name=error.name, description=error.description, code=error.code,
        http_status=error.http_status, fields=_fields(error.fields),
    )


def _render_authenticator(authenticator: AuthenticatorDefinition) -> AuthenticatorSchema:
    kind = authenticator.type
    return AuthenticatorSchema(
        id=authenticator.id, name=authenticator.name, description=authenticator.description,
        type=None if kind is None else str(getattr(kind, "value", kind)),
        potential_errors=_refs(authenticator.potential_errors),
    )


def _render_endpoint(endpoint: EndpointDefinition) -> EndpointSchema:
    return EndpointSchema(
        id=endpoint.id, name=endpoint.name, description=endpoint.description,
        http_method=str(endpoint.http_method), argument_set=_ref(endpoint.argument_set),
        fields=_fields(endpoint.fields), authenticator=_ref(endpoint.authenticator),
        potential_errors=_refs(endpoint.potential_errors),
    )


def _render_controller(controller: ControllerDefinition) -> ControllerSchema:
    return ControllerSchema(
        id=controller.id, name=controller.name, description=controller.description,
        authenticator=_ref(controller.authenticator),
        endpoints={name: endpoint.id for name, endpoint in controller.endpoints.items()},
    )


def _render_api(api: ApiDefinition) -> ApiSchema:
    return ApiSchema(
        id=api.id, name=api.name, description=api.description,
        authenticator=_ref(api.authenticator),
        controllers={name: controller.id for name, controller in api.controllers.items()},
        routes=[
            RouteSchema(
                method=route.method, path=route.path,
                controller=route.controller.id, endpoint=route.endpoint,
            )
            for route in api.routes
        ],
    )


_RENDERERS: dict[type, Callable[[Any], Any]] = {
    ScalarDefinition: _render_scalar,
    EnumDefinition: _render_enum,
    ObjectDefinition: _render_object,
    ArgumentSetDefinition: _render_argument_set,
    ErrorDefinition: _render_error,
    AuthenticatorDefinition: _render_authenticator,
    EndpointDefinition: _render_endpoint,
    ControllerDefinition: _render_controller,
    ApiDefinition: _render_api,
}


def render_objects(objects: ObjectSet) -> list:
    """Schema records for every schema-visible definition in ``objects``."""
    records = []
    for definition in objects:
        if not getattr(definition, "schema", True):
            continue
        renderer = _RENDERERS.get(type(definition))
        if renderer is not None:
            records.append(renderer(definition))
    return records


def build_schema_document(api: ApiDefinition, host: str, namespace: str) -> SchemaDocument:
    return SchemaDocument(
        schema_version=SCHEMA_VERSION, host=host, namespace=namespace, api=api.id,
        objects=render_objects(collate_objects(api)),
    )


def render_schema(api: ApiDefinition, host: str, namespace: str) -> dict:
    """Serializable schema document for ``api``."""
    return build_schema_document(api, host, namespace).model_dump()
