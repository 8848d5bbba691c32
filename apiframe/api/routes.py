"""Routes — mounts an ApiDefinition's route table onto a FastAPI router.

Invariants:
    - One FastAPI route per route-table entry; FastAPI does the URL matching
    - Path params and query params are merged into the raw params (path wins)
    - A JSON body is decoded only when the content type says JSON
    - The pipeline runs on the Starlette threadpool; the event loop never blocks on actions
    - Undecodable JSON returns the invalid_json_body error body (400)

Design Decisions:
    - Handlers are closures built per route: the resolved controller/endpoint are
      captured once at mount time, not looked up per request
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Request as HTTPRequest
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from apiframe.config import Settings, get_settings
from apiframe.core.api_definition import ApiDefinition, Route
from apiframe.core.errors import InvalidRequestBodyError
from apiframe.core.http_types import RawRequest, Request
from apiframe.core.result import Err, Ok, Result
from apiframe.services.endpoint_executor import execute_request
from apiframe.services.schema_render import render_schema

logger = logging.getLogger(__name__)


def build_router(api: ApiDefinition, settings: Settings | None = None) -> APIRouter:
    """Router with one route per route-table entry plus the schema route."""
    settings = settings or get_settings()
    router = APIRouter()
    for route in api.routes:
        endpoint = route.endpoint_definition
        if endpoint is None:
            logger.warning(
                f"Skipping route {route.method.upper()} /{route.path}: "
                f"endpoint '{route.endpoint}' not found",
                extra={"api": api.id, "controller": route.controller.id},
            )
            continue
        router.add_api_route(
            f"/{route.path}",
            _make_endpoint_handler(api, route, settings),
            methods=[route.method.upper()],
            name=endpoint.id,
            include_in_schema=False,
        )
    if settings.expose_schema:
        router.add_api_route(
            settings.schema_path, _make_schema_handler(api, settings),
            methods=["GET"], name=f"{api.id}/schema", include_in_schema=False,
        )
    return router


def _make_endpoint_handler(api: ApiDefinition, route: Route, settings: Settings):
    controller = route.controller
    endpoint = route.endpoint_definition

    async def handle(request: HTTPRequest) -> JSONResponse:
        body = await _read_json_body(request)
        if isinstance(body, Err):
            return JSONResponse(
                status_code=body.error.http_status, content=body.error.to_response(),
            )
        raw = RawRequest(
            method=request.method.lower(),
            body=body.value,
            params={**request.query_params, **request.path_params},
            headers=dict(request.headers),
        )
        api_request = Request(raw=raw, api=api, controller=controller, endpoint=endpoint)
        response = await run_in_threadpool(
            execute_request, api_request, settings.include_backtraces,
        )
        return JSONResponse(
            status_code=response.status, content=response.body, headers=response.headers,
        )

    return handle


def _make_schema_handler(api: ApiDefinition, settings: Settings):
    async def schema(request: HTTPRequest) -> dict:
        host = settings.schema_host or request.url.hostname or "localhost"
        return render_schema(api, host=host, namespace=settings.schema_namespace)

    return schema


async def _read_json_body(request: HTTPRequest) -> Result[Any]:
    content_type = request.headers.get("content-type", "")
    if "json" not in content_type:
        return Ok(None)
    payload = await request.body()
    if not payload.strip():
        return Ok(None)
    try:
        return Ok(json.loads(payload))
    except ValueError:
        logger.warning(
            "Request body could not be decoded as JSON",
            extra={"path": request.url.path, "method": request.method},
        )
        return Err(InvalidRequestBodyError())
