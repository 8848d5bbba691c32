"""Endpoint Executor — per-request state machine from authentication to serialized response.

States:
    START → AUTHENTICATING → PARSING_ARGUMENTS → EXECUTING_ACTION → SERIALIZING → DONE
    any failing phase → ERRORED (terminal)

Invariants:
    - Every phase returns Ok | Err; nothing raised by user code escapes execute_request()
    - Only the per-request Request/Response are mutated; definitions are read-only
    - The authenticator is resolved endpoint → controller → API; only the winner runs
    - Arguments come from the body when present, otherwise from params
    - Error bodies are {"error": {"code", "description", "detail"}} with the error's status
    - Headers set before a failure (e.g. by the authenticator) survive on the error response

Design Decisions:
    - One EndpointExecution per request, discarded afterwards: concurrent requests
      share nothing but the frozen definitions
    - The pipeline is synchronous; transports that need concurrency run it on a
      worker thread (see api.routes)
"""

import logging
from enum import Enum
from typing import Any

from apiframe.core.argument_set import ArgumentSet, build_argument_set
from apiframe.core.authenticators import (
    AuthenticatorDefinition, authenticate, resolve_authenticator,
)
from apiframe.core.errors import ApiRuntimeError
from apiframe.core.http_types import Request, Response
from apiframe.core.result import Err, Ok, Result, capture
from apiframe.infrastructure.observability import PipelineLogAdapter, level_for_status

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    START = "start"
    AUTHENTICATING = "authenticating"
    PARSING_ARGUMENTS = "parsing_arguments"
    EXECUTING_ACTION = "executing_action"
    SERIALIZING = "serializing"
    DONE = "done"
    ERRORED = "errored"


class EndpointExecution:
    """Runs one request through the pipeline. Not reusable."""

    def __init__(self, request: Request, include_backtraces: bool = False):
        self.request = request
        self.response = Response()
        self.include_backtraces = include_backtraces
        self.state = PipelineState.START
        self.error: ApiRuntimeError | None = None
        self.log = PipelineLogAdapter(logger, _request_extra(request))

    def run(self) -> Response:
        if self.state is not PipelineState.START:
            raise ApiRuntimeError("An endpoint execution can only be run once")

        self._transition(PipelineState.AUTHENTICATING)
        result = self._authenticate()
        if isinstance(result, Err):
            return self._fail(result.error)

        self._transition(PipelineState.PARSING_ARGUMENTS)
        result = self._parse_arguments()
        if isinstance(result, Err):
            return self._fail(result.error)
        self.request.arguments = result.value

        self._transition(PipelineState.EXECUTING_ACTION)
        result = self._invoke_action()
        if isinstance(result, Err):
            return self._fail(result.error)

        self._transition(PipelineState.SERIALIZING)
        result = self._serialize()
        if isinstance(result, Err):
            return self._fail(result.error)
        self.response.body = result.value

        self._transition(PipelineState.DONE)
        return self.response

    # --- Phases ---------------------------------------------------------------

    def _authenticate(self) -> Result[AuthenticatorDefinition | None]:
        authenticator = resolve_authenticator(
            self.request.endpoint, self.request.controller, self.request.api,
        )
        return authenticate(self.request, self.response, authenticator)

    def _parse_arguments(self) -> Result[ArgumentSet]:
        endpoint = self.request.endpoint
        if endpoint is None:
            return Err(ApiRuntimeError("No endpoint has been resolved for this request"))
        if endpoint.argument_set is None:
            return Err(ApiRuntimeError(
                f"No argument set has been resolved for endpoint '{endpoint.id}'",
            ))
        return build_argument_set(endpoint.argument_set, self.request.argument_source)

    def _invoke_action(self) -> Result[Any]:
        action = self.request.endpoint.action
        if action is None or not callable(action):
            return Err(ApiRuntimeError(
                f"No action has been defined for endpoint '{self.request.endpoint.id}'",
            ))
        return capture(action, self.request, self.response)

    def _serialize(self) -> Result[Any]:
        if self.response.body is not None:
            return Ok(self.response.body)
        return capture(self.request.endpoint.fields.generate_hash, self.response.fields)

    # --- Transitions ----------------------------------------------------------

    def _transition(self, state: PipelineState) -> None:
        self.state = state
        self.log.debug(f"Pipeline state: {state.value}", extra={"pipeline_state": state.value})

    def _fail(self, error: ApiRuntimeError) -> Response:
        failed_in = self.state
        self.state = PipelineState.ERRORED
        self.error = error
        try:
            body = error.to_response(self.include_backtraces)
        except Exception as exc:
            self.log.error(
                f"Could not render error '{error.code}': {exc}", exc_info=True,
                extra={"pipeline_state": failed_in.value},
            )
            error = ApiRuntimeError.from_exception(exc)
            self.error = error
            body = error.to_response(self.include_backtraces)

        self.response.status = error.http_status
        self.response.body = body
        self.log.log(
            level_for_status(error.http_status),
            f"Endpoint failed with {error.code}: {error.description}",
            extra={
                "pipeline_state": failed_in.value, "error_code": error.code,
                "http_status": error.http_status,
            },
        )
        return self.response


def _request_extra(request: Request) -> dict[str, Any]:
    return {
        key: getattr(definition, "id", None)
        for key, definition in (
            ("api", request.api), ("controller", request.controller),
            ("endpoint", request.endpoint),
        )
    }


def execute_request(request: Request, include_backtraces: bool = False) -> Response:
    """Run ``request`` through its endpoint and return the response."""
    return EndpointExecution(request, include_backtraces).run()
