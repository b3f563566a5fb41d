from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from json import JSONDecodeError
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .dispatcher import Dispatcher
from .ledger import Ledger
from .logging_setup import configure_logging
from .models import HealthResponse, ResultsResponse, ToolsResponse
from .registry import ToolRegistry, build_registry
from .settings import Settings, settings

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def create_app(
    config: Settings | None = None,
    *,
    registry: ToolRegistry | None = None,
    ledger: Ledger | None = None,
) -> FastAPI:
    """Build the gateway application.

    Settings, registry and ledger are passed in explicitly; the module-level
    `app` below is the default wiring used by uvicorn.
    """

    cfg = config or settings
    tool_registry = registry or build_registry(cfg)
    invocation_ledger = ledger or Ledger(cfg.results_dir)
    dispatcher = Dispatcher(tool_registry, invocation_ledger)
    cors_headers: dict[str, str] = dict(CORS_HEADERS) if cfg.cors else {}

    @asynccontextmanager
    async def lifespan(app: FastAPI):  # noqa: ARG001
        configure_logging(config=cfg)
        logger.info(
            "Tool gateway ready: tools=%s results_dir=%s",
            tool_registry.names,
            invocation_ledger.directory,
        )
        yield

    app = FastAPI(
        title="Tool Invocation Gateway",
        version="0.1.0",
        description=(
            "Named tools behind one JSON endpoint. Every invocation is recorded "
            "as a JSON file and can be listed from /results."
        ),
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.registry = tool_registry
    app.state.ledger = invocation_ledger
    app.state.dispatcher = dispatcher

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception in request %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": str(exc) or "Internal server error"})

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse()

    @app.get("/tools", response_model=ToolsResponse)
    def list_tools() -> JSONResponse:
        body = ToolsResponse(tools=tool_registry.list()).model_dump(by_alias=True)
        return JSONResponse(body, headers=cors_headers)

    if cfg.cors:

        @app.options("/tools")
        def tools_preflight() -> Response:
            return Response(status_code=200, headers=CORS_HEADERS)

    @app.post("/tools")
    async def call_tool(request: Request) -> JSONResponse:
        payload: Any
        try:
            payload = await request.json()
        except (JSONDecodeError, UnicodeDecodeError):
            payload = None

        outcome = await dispatcher.dispatch(payload)
        return JSONResponse(outcome.body, status_code=outcome.status_code, headers=cors_headers)

    @app.get("/results", response_model=ResultsResponse)
    async def list_results() -> JSONResponse:
        try:
            entries = await run_in_threadpool(invocation_ledger.list)
        except OSError as exc:
            logger.exception("Failed to list results in %s", invocation_ledger.directory)
            return JSONResponse({"error": f"Failed to read results list: {exc}"}, status_code=500)
        return JSONResponse(ResultsResponse(results=entries).model_dump())

    return app


app = create_app()
