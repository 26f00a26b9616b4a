"""
postmark_mcp_http.py
--------------------
The Postmark tools over MCP JSON-RPC 2.0 on plain HTTP POST, for hosts that
cannot spawn a stdio process (App Runner, Lambda behind API Gateway, ...).

Start:
    uvicorn --factory postmark_mcp_http:create_app --port 8004

Endpoints:
    GET  /  → health check
    POST /  → JSON-RPC: initialize, tools/list, tools/call
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from fastapi.concurrency import run_in_threadpool

from postmark_config import configure_logging, resolve_settings
from tool_catalog import create_registry
from tool_errors import ErrorKind
from tool_registry import ToolRegistry

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_INFO = {"name": "postmark-mcp", "version": "1.0.0"}

METHOD_NOT_FOUND = -32601
INVALID_REQUEST = -32600
PARSE_ERROR = -32700


def _result(request_id: Any, result: Dict[str, Any]) -> JSONResponse:
    return JSONResponse({"jsonrpc": "2.0", "id": request_id, "result": result})


def _error(request_id: Any, code: int, message: str) -> JSONResponse:
    return JSONResponse({
        "jsonrpc": "2.0",
        "id": request_id,
        "error": {"code": code, "message": message},
    })


def create_app(registry: Optional[ToolRegistry] = None) -> FastAPI:
    if registry is None:
        configure_logging()
        # ConfigurationMissing propagates: the app must not come up half-configured
        settings = resolve_settings()
        configure_logging(settings.log_level)
        registry = create_registry(settings)

    app = FastAPI(title="Postmark MCP Server", version=SERVER_INFO["version"])

    # -------------------------------------------------------
    # Health check
    # -------------------------------------------------------
    @app.get("/")
    async def health():
        return {"status": "ok", "service": SERVER_INFO["name"], "tools": registry.names()}

    # -------------------------------------------------------
    # MCP JSON-RPC 2.0 handler
    # -------------------------------------------------------
    @app.post("/")
    async def mcp_handler(request: Request):
        try:
            body = await request.json()
        except ValueError:
            return _error(None, PARSE_ERROR, "Parse error")
        if not isinstance(body, dict):
            return _error(None, INVALID_REQUEST, "Invalid Request")

        method = body.get("method", "")
        params = body.get("params")
        if not isinstance(params, dict):
            params = {}
        request_id = body.get("id")

        # --- notifications (no id) → never respond ---
        if request_id is None:
            return Response(status_code=204)

        if method == "initialize":
            return _result(request_id, {
                "protocolVersion": PROTOCOL_VERSION,
                "serverInfo": SERVER_INFO,
                "capabilities": {"tools": {}},
            })

        if method == "ping":
            return _result(request_id, {})

        if method == "tools/list":
            tools = [t.model_dump(by_alias=True, exclude_none=True) for t in registry.list_tools()]
            return _result(request_id, {"tools": tools})

        if method == "tools/call":
            tool_name = params.get("name")
            arguments = params.get("arguments")
            logger.info(f"[HTTP] tools/call {tool_name}")

            result = await run_in_threadpool(registry.dispatch, tool_name, arguments)
            if result.error_kind == ErrorKind.UNKNOWN_TOOL:
                return _error(request_id, METHOD_NOT_FOUND, f"Tool not found: {tool_name}")
            return _result(request_id, result.to_dict())

        return _error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")

    return app

