"""Root conftest — shared API factories and a pipeline runner."""

import os

import pytest

# Keep test output readable and independent of any local .env
os.environ.setdefault("APIFRAME_LOG_FORMAT", "text")

from apiframe.core.builders import ApiBuilder  # noqa: E402
from apiframe.core.http_types import RawRequest, Request  # noqa: E402
from apiframe.services.endpoint_executor import execute_request  # noqa: E402


@pytest.fixture
def build_api():
    """Factory: ExampleAPI with one controller 'test' holding one endpoint 'test'.

    ``configure`` receives the EndpointBuilder to add arguments, fields and an action.
    """
    def factory(configure=None, *, api_auth=None, controller_auth=None,
                registry=None, http_method="post"):
        builder = ApiBuilder("ExampleAPI", registry=registry, authenticator=api_auth)
        controller = builder.controller("test", authenticator=controller_auth)
        endpoint = controller.endpoint("test", http_method=http_method)
        if configure is not None:
            configure(endpoint)
        builder.route(http_method, "test", controller="test", endpoint="test")
        return builder.build()
    return factory


@pytest.fixture
def run_request():
    """Run the pipeline for ExampleAPI's test endpoint; returns (request, response)."""
    def run(api, body=None, params=None, headers=None):
        controller = api.controllers["test"]
        request = Request(
            raw=RawRequest(
                method="post", body=body, params=params or {}, headers=headers or {},
            ),
            api=api,
            controller=controller,
            endpoint=controller.endpoints["test"],
        )
        return request, execute_request(request)
    return run
