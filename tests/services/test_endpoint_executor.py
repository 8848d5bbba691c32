"""Endpoint Executor — the per-request pipeline from authentication to response body.

Tests cover:
    - Happy path: arguments parsed, action run, fields serialized
    - Authenticator cascade (endpoint > controller > API), override not merge
    - Authenticator/argument/action/serialization failures → error envelopes
    - Declared errors carry their own code, status and detail
    - Body vs params as argument source
    - Headers set before a failure survive
    - State machine: DONE / ERRORED, single use
"""

import logging

import pytest

from apiframe.core.authenticators import AuthenticatorDefinition
from apiframe.core.builders import ApiBuilder
from apiframe.core.errors import ApiRuntimeError, ErrorException
from apiframe.core.http_types import RawRequest, Request
from apiframe.core.registry import TypeRegistry
from apiframe.services.endpoint_executor import EndpointExecution, PipelineState


def _tagging_auth(tag: str) -> AuthenticatorDefinition:
    def action(request, response):
        response.add_header("x-auth", tag)
    return AuthenticatorDefinition(id=f"{tag}Authenticator", type="bearer", action=action)


def _greeter(endpoint):
    endpoint.argument("name", "string", required=True)
    endpoint.field("greeting", "string")

    @endpoint.action
    def greet(request, response):
        response.add_field("greeting", f"Hello {request.arguments['name']}!")


def _execution(api, body=None, params=None):
    controller = api.controllers["test"]
    request = Request(
        raw=RawRequest(method="post", body=body, params=params or {}),
        api=api, controller=controller, endpoint=controller.endpoints["test"],
    )
    return EndpointExecution(request)


# ─── Happy Path ──────────────────────────────────────────────────

def test_runs_action_and_serializes_fields(build_api, run_request):
    api = build_api(_greeter)
    request, response = run_request(api, body={"name": "Phillip"})

    assert response.status == 200
    assert response.body == {"greeting": "Hello Phillip!"}
    assert request.arguments["name"] == "Phillip"


def test_params_are_used_when_body_is_absent(build_api, run_request):
    api = build_api(_greeter)
    _, response = run_request(api, params={"name": "Adam"})
    assert response.body == {"greeting": "Hello Adam!"}


def test_body_takes_precedence_over_params(build_api, run_request):
    api = build_api(_greeter)
    _, response = run_request(api, body={"name": "Body"}, params={"name": "Params"})
    assert response.body == {"greeting": "Hello Body!"}


def test_body_set_by_action_is_used_verbatim(build_api, run_request):
    def configure(endpoint):
        endpoint.field("ignored", "string")
        endpoint.action(lambda request, response: setattr(response, "body", {"raw": True}))

    _, response = run_request(build_api(configure))
    assert response.body == {"raw": True}


def test_action_can_set_status_and_headers(build_api, run_request):
    def configure(endpoint):
        @endpoint.action
        def created(request, response):
            response.status = 201
            response.add_header("location", "/things/1")

    _, response = run_request(build_api(configure))
    assert response.status == 201
    assert response.headers == {"location": "/things/1"}
    assert response.body == {}


def test_headers_are_available_to_actions(build_api, run_request):
    def configure(endpoint):
        endpoint.field("agent", "string")
        endpoint.action(lambda request, response: response.add_field(
            "agent", request.header("user-agent"),
        ))

    _, response = run_request(build_api(configure), headers={"User-Agent": "tests"})
    assert response.body == {"agent": "tests"}


# ─── Authenticator Cascade ───────────────────────────────────────

def test_endpoint_authenticator_wins(build_api, run_request):
    def configure(endpoint):
        _greeter(endpoint)
        endpoint.authenticator(_tagging_auth("endpoint"))

    api = build_api(
        configure, api_auth=_tagging_auth("api"), controller_auth=_tagging_auth("controller"),
    )
    _, response = run_request(api, body={"name": "Adam"})
    assert response.headers["x-auth"] == "endpoint"


def test_controller_authenticator_overrides_api(build_api, run_request):
    api = build_api(
        _greeter, api_auth=_tagging_auth("api"), controller_auth=_tagging_auth("controller"),
    )
    _, response = run_request(api, body={"name": "Adam"})
    assert response.headers["x-auth"] == "controller"


def test_api_authenticator_is_the_fallback(build_api, run_request):
    api = build_api(_greeter, api_auth=_tagging_auth("api"))
    _, response = run_request(api, body={"name": "Adam"})
    assert response.headers["x-auth"] == "api"


def test_only_the_winning_authenticator_runs(build_api, run_request):
    calls = []

    def recording(tag):
        return AuthenticatorDefinition(
            id=tag, type="bearer", action=lambda request, response: calls.append(tag),
        )

    api = build_api(_greeter, api_auth=recording("api"), controller_auth=recording("controller"))
    run_request(api, body={"name": "Adam"})
    assert calls == ["controller"]


def test_all_three_levels_only_endpoint_runs(build_api, run_request):
    calls = []

    def recording(tag):
        return AuthenticatorDefinition(
            id=tag, type="bearer", action=lambda request, response: calls.append(tag),
        )

    def configure(endpoint):
        _greeter(endpoint)
        endpoint.authenticator(recording("endpoint"))

    api = build_api(
        configure, api_auth=recording("api"), controller_auth=recording("controller"),
    )
    run_request(api, body={"name": "Adam"})
    assert calls == ["endpoint"]


def test_anonymous_authenticator_without_action_passes(build_api, run_request):
    anonymous = AuthenticatorDefinition(id="Anonymous", type="anonymous")
    _, response = run_request(build_api(_greeter, api_auth=anonymous), body={"name": "Adam"})
    assert response.status == 200


def test_bearer_authenticator_without_action_fails(build_api, run_request):
    bearer = AuthenticatorDefinition(id="Bearer", type="bearer")
    _, response = run_request(build_api(_greeter, api_auth=bearer), body={"name": "Adam"})
    assert response.status == 500
    assert response.body["error"]["code"] == "generic_runtime_error"


# ─── Failures ────────────────────────────────────────────────────

def test_authenticator_runtime_error(build_api, run_request):
    def reject(request, response):
        raise ApiRuntimeError("Authentication backend unavailable")

    auth = AuthenticatorDefinition(id="Auth", type="bearer", action=reject)
    _, response = run_request(build_api(_greeter, api_auth=auth), body={"name": "Adam"})

    assert response.status == 500
    assert response.body == {
        "error": {
            "code": "generic_runtime_error",
            "description": "Authentication backend unavailable",
            "detail": {"class": "apiframe.core.errors.ApiRuntimeError"},
        }
    }


def test_authenticator_declared_error_keeps_headers(build_api, run_request):
    registry = TypeRegistry()
    unauthorized = registry.error(
        "Unauthorized", code="unauthorized", description="A valid token is required",
        http_status=401,
    ).field("scheme", "string")

    def reject(request, response):
        response.add_header("www-authenticate", "Bearer")
        raise ErrorException(unauthorized.definition, {"scheme": "bearer"})

    auth = AuthenticatorDefinition(
        id="Auth", type="bearer", action=reject, potential_errors=[unauthorized.definition],
    )
    api = build_api(_greeter, api_auth=auth, registry=registry)
    _, response = run_request(api, body={"name": "Adam"})

    assert response.status == 401
    assert response.headers == {"www-authenticate": "Bearer"}
    assert response.body == {
        "error": {
            "code": "unauthorized",
            "description": "A valid token is required",
            "detail": {"scheme": "bearer"},
        }
    }


def test_action_declared_error(build_api, run_request):
    registry = TypeRegistry()
    not_found = registry.error(
        "NotFound", code="not_found", description="No such thing", http_status=404,
    )

    def configure(endpoint):
        endpoint.potential_error(not_found)

        @endpoint.action
        def missing(request, response):
            raise ErrorException(not_found.definition)

    _, response = run_request(build_api(configure, registry=registry))
    assert response.status == 404
    assert response.body["error"]["code"] == "not_found"
    assert response.body["error"]["detail"] == {}


def test_missing_argument_is_400(build_api, run_request):
    _, response = run_request(build_api(_greeter), body={})
    assert response.status == 400
    assert response.body["error"]["code"] == "missing_required_argument"
    assert response.body["error"]["detail"]["path"] == ["name"]


def test_invalid_argument_is_400(build_api, run_request):
    _, response = run_request(build_api(_greeter), body={"name": 7})
    assert response.status == 400
    assert response.body["error"]["code"] == "invalid_argument"
    assert response.body["error"]["detail"]["issue"] == "invalid_scalar"


def test_non_mapping_body_is_runtime_error(build_api, run_request):
    _, response = run_request(build_api(_greeter), body=["not", "a", "mapping"])
    assert response.status == 500
    assert response.body["error"]["code"] == "generic_runtime_error"


def test_foreign_exception_in_action(build_api, run_request):
    def configure(endpoint):
        @endpoint.action
        def explode(request, response):
            raise RuntimeError("database went away")

    _, response = run_request(build_api(configure))
    assert response.status == 500
    assert response.body["error"]["description"] == "database went away"
    assert response.body["error"]["detail"] == {"class": "builtins.RuntimeError"}


def test_missing_action_is_runtime_error(build_api, run_request):
    _, response = run_request(build_api())
    assert response.status == 500
    assert response.body["error"]["description"] == (
        "No action has been defined for endpoint 'test/test'"
    )


def test_null_field_value_fails_serialization(build_api, run_request):
    def configure(endpoint):
        endpoint.field("name", "string")
        endpoint.action(lambda request, response: None)

    _, response = run_request(build_api(configure))
    assert response.status == 500
    assert response.body["error"]["code"] == "null_field_value"
    assert response.body["error"]["detail"]["field"] == "name"


def test_unresolved_argument_set_rejects_the_request():
    calls = []
    registry = TypeRegistry()
    registry.argument_set("UserArgs").argument("name", "string", required=True)
    builder = ApiBuilder("ExampleAPI", registry=registry)
    builder.controller("test").endpoint(
        "test", argument_set="UserArgz",
        action=lambda request, response: calls.append(request),
    )

    response = _execution(builder.build(), body={}).run()
    assert response.status == 500
    assert response.body["error"]["description"] == (
        "No argument set has been resolved for endpoint 'test/test'"
    )
    assert calls == []


def test_action_not_run_when_arguments_fail(build_api, run_request):
    calls = []

    def configure(endpoint):
        endpoint.argument("id", "integer", required=True)
        endpoint.action(lambda request, response: calls.append(request))

    run_request(build_api(configure), body={"id": "abc"})
    assert calls == []


def test_failures_are_logged_with_request_ids(build_api, run_request, caplog):
    with caplog.at_level(logging.WARNING, logger="apiframe.services.endpoint_executor"):
        run_request(build_api(_greeter), body={})
    record = [r for r in caplog.records if r.name == "apiframe.services.endpoint_executor"][-1]
    assert record.levelno == logging.WARNING
    assert record.api == "ExampleAPI"
    assert record.controller == "test"
    assert record.endpoint == "test/test"
    assert record.error_code == "missing_required_argument"
    assert record.pipeline_state == "parsing_arguments"


# ─── State Machine ───────────────────────────────────────────────

def test_successful_run_ends_in_done(build_api):
    execution = _execution(build_api(_greeter), body={"name": "Adam"})
    assert execution.state is PipelineState.START
    execution.run()
    assert execution.state is PipelineState.DONE
    assert execution.error is None


def test_failed_run_ends_in_errored(build_api):
    execution = _execution(build_api(_greeter), body={})
    response = execution.run()
    assert execution.state is PipelineState.ERRORED
    assert execution.error.code == "missing_required_argument"
    assert response.status == 400


def test_execution_is_single_use(build_api):
    execution = _execution(build_api(_greeter), body={"name": "Adam"})
    execution.run()
    with pytest.raises(ApiRuntimeError):
        execution.run()


def test_backtraces_included_when_enabled(build_api):
    def configure(endpoint):
        endpoint.action(lambda request, response: 1 / 0)

    api = build_api(configure)
    controller = api.controllers["test"]
    request = Request(
        raw=RawRequest(method="post"), api=api, controller=controller,
        endpoint=controller.endpoints["test"],
    )
    response = EndpointExecution(request, include_backtraces=True).run()
    assert response.body["error"]["detail"]["backtrace"]
