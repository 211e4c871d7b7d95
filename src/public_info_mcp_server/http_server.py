#!/usr/bin/env python
from __future__ import annotations

import json
import logging
from typing import Any, Dict

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount
from starlette.types import Receive, Scope, Send
import uvicorn

from .config_loader import ServerConfig, load_config_from_env
from .core.dispatcher import Dispatcher
from .main import create_dispatcher
from .mcp_protocol import NO_ID, ErrorCodes, make_error_response, make_transport_error

log = logging.getLogger(__name__)

MCP_PATHS = ("/mcp", "/")

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, Accept, Origin, X-Request-ID",
    "Access-Control-Max-Age": "86400",
}


def _json_response(payload: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(payload, status_code=status_code, headers=CORS_HEADERS)


def _empty_response() -> Response:
    return Response(status_code=204, headers=CORS_HEADERS)


def create_app(config: ServerConfig | None = None, dispatcher: Dispatcher | None = None) -> Starlette:
    # Every path and method lands in one endpoint so gatekeeping happens here.
    cfg = config or load_config_from_env()
    dispatch = dispatcher or create_dispatcher(cfg)

    async def mcp_endpoint(request: Request) -> Response:
        if request.method == "OPTIONS":
            return _empty_response()

        path = request.url.path
        if path not in MCP_PATHS:
            log.warning("Rejected request to unknown path %s", path)
            return _json_response(
                make_transport_error("Invalid endpoint. Use /mcp for MCP protocol requests."),
                status_code=404,
            )

        if request.method != "POST":
            log.warning("Rejected %s request to %s", request.method, path)
            return _json_response(
                make_transport_error("Method not allowed. Use POST for MCP requests."),
                status_code=405,
            )

        content_type = request.headers.get("content-type", "")
        if "application/json" not in content_type.lower():
            log.warning("Rejected request with content-type %r", content_type)
            return _json_response(
                make_transport_error(
                    "Invalid Content-Type. Expected application/json.",
                    code=ErrorCodes.PARSE_ERROR,
                ),
                status_code=400,
            )

        raw = await request.body()
        try:
            body = json.loads(raw)
        except ValueError as exc:
            return _json_response(
                make_error_response(NO_ID, f"Parse error: {exc}", code=ErrorCodes.PARSE_ERROR),
                status_code=400,
            )

        reply = await dispatch.handle(body)
        if reply is None:
            return _empty_response()
        return _json_response(reply)

    async def mcp_app(scope: Scope, receive: Receive, send: Send) -> None:
        response = await mcp_endpoint(Request(scope, receive))
        await response(scope, receive, send)

    # A Mount matches regardless of method, so the router never answers 405 itself.
    return Starlette(
        routes=[
            Mount("", app=mcp_app),
        ],
    )


def run_from_env() -> None:
    # Read host/port from environment and serve via Uvicorn.
    cfg = load_config_from_env()
    logging.basicConfig(
        level=cfg.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(cfg)
    log.info("Serving %s on http://%s:%s/mcp", cfg.server_name, cfg.server_host, cfg.server_port)
    uvicorn.run(app, host=cfg.server_host, port=cfg.server_port, log_level=cfg.log_level)


if __name__ == "__main__":
    run_from_env()
