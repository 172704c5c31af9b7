from __future__ import annotations

import asyncio
import contextlib
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from mcp.types import TextContent, Tool
from starlette.datastructures import Headers
from starlette.types import Receive, Scope, Send

from . import __version__
from .bridge.hub import BrowserHub
from .bridge.websocket import create_browser_app
from .commands import Command
from .sessions import AmbientSessionResolver, ScopedSessionResolver, SessionManager
from .shared.config import AppConfig
from .shared.errors import SchemaValidationError, ToolExecutionError, UnknownTool
from .shared.logging import get_logger
from .tools.base import ToolContext
from .tools.registry import call_tool, list_definitions

logger = get_logger(__name__)

SERVER_NAME = "hello3d-mcp"
SESSION_HEADER = "mcp-session-id"


def _tool_definitions() -> list[Tool]:
    return [
        Tool(name=tool.name, title=tool.title, description=tool.description, inputSchema=tool.input_schema)
        for tool in list_definitions()
    ]


def _request_session_id(app: Server) -> Optional[str]:
    try:
        ctx = app.request_context
    except LookupError:
        return None
    request = getattr(ctx, "request", None)
    headers = getattr(request, "headers", None)
    if headers is None:
        return None
    return headers.get(SESSION_HEADER)


def _notify_tool_call(context: ToolContext, tool_name: str) -> None:
    session_id = context.session_id()
    if not session_id:
        return
    sessions = context.hub.sessions
    sessions.create_session(session_id)
    sessions.touch_session(session_id)
    # Only the session's own browser hears about the call, never a broadcast.
    if context.hub.registry.lookup(session_id) is not None:
        context.hub.router.send(session_id, Command.tool_call(tool_name))


async def _execute_tool(context: ToolContext, tool_name: str, arguments: dict[str, Any]) -> list[TextContent]:
    logger.debug("Tool call %s (session: %s)", tool_name, context.session_id())
    _notify_tool_call(context, tool_name)
    try:
        text = await call_tool(tool_name, arguments, context)
    except (SchemaValidationError, UnknownTool) as exc:
        raise ToolExecutionError(str(exc)) from exc
    return [TextContent(type="text", text=text)]


def create_server(context: ToolContext) -> Server:
    app: Server = Server(SERVER_NAME, version=__version__)

    @app.list_tools()
    async def list_tools() -> list[Tool]:
        return _tool_definitions()

    @app.call_tool()
    async def handle_call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        session_id = _request_session_id(app)
        return await context.hub.resolver.run(session_id, lambda: _execute_tool(context, name, arguments or {}))

    return app


class MCPEndpoint:
    """ASGI endpoint for ``/mcp`` that also retires sessions the client deletes."""

    def __init__(self, session_manager: StreamableHTTPSessionManager, sessions: SessionManager) -> None:
        self.session_manager = session_manager
        self.sessions = sessions

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["method"] == "DELETE":
            session_id = Headers(scope=scope).get(SESSION_HEADER)
            if session_id:
                self.sessions.close_session(session_id)
                logger.info("MCP session %s closed by client", session_id)
        await self.session_manager.handle_request(scope, receive, send)


def create_http_app(server: Server, hub: BrowserHub, static_dir: Optional[str] = None) -> FastAPI:
    session_manager = StreamableHTTPSessionManager(app=server)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with session_manager.run():
            yield

    app = FastAPI(title="hello3d MCP server", version=__version__, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["Mcp-Session-Id"],
    )
    app.add_route("/mcp", MCPEndpoint(session_manager, hub.sessions), methods=["GET", "POST", "DELETE"])

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {"status": "ok", "mode": "http", **hub.status()}

    frontend_dist = Path(static_dir) if static_dir else None
    if frontend_dist is not None and frontend_dist.is_dir():
        root = frontend_dist.resolve()

        @app.get("/{full_path:path}")
        async def serve_frontend(full_path: str):
            file_path = (root / full_path).resolve()
            if file_path.is_relative_to(root) and file_path.is_file():
                return FileResponse(file_path)
            return FileResponse(root / "index.html")

    return app


def _uvicorn_server(app: Any, host: str, port: int) -> uvicorn.Server:
    # log_config=None keeps uvicorn on our handlers; nothing may reach stdout.
    config = uvicorn.Config(app, host=host, port=port, log_config=None, access_log=False)
    return uvicorn.Server(config)


async def _serve_until_first_exit(servers: list[uvicorn.Server], extra: Optional[asyncio.Task] = None) -> None:
    tasks = [asyncio.create_task(server.serve()) for server in servers]
    if extra is not None:
        tasks.append(extra)
    try:
        await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for server in servers:
            server.should_exit = True
        if extra is not None and not extra.done():
            extra.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task


async def run_stdio(config: AppConfig) -> None:
    resolver = AmbientSessionResolver()
    hub = BrowserHub(resolver, config.bridge)
    hub.sessions.create_session(resolver.session_id)
    context = ToolContext(hub=hub, browser_url=config.server.browser_url, mode="stdio")
    server = create_server(context)
    ws_server = _uvicorn_server(create_browser_app(hub), config.server.host, config.server.ws_port)

    logger.info("Starting hello3d MCP server in stdio mode (session: %s)", resolver.session_id)
    logger.info("Browser WebSocket on ws://%s:%d", config.server.host, config.server.ws_port)
    logger.info("Connect a browser at %s?sessionId=%s", config.server.browser_url, resolver.session_id)

    async def _stdio() -> None:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
        logger.info("stdio closed by MCP host")

    try:
        await _serve_until_first_exit([ws_server], asyncio.create_task(_stdio()))
    finally:
        hub.shutdown()


async def run_http(config: AppConfig) -> None:
    hub = BrowserHub(ScopedSessionResolver(), config.bridge)
    context = ToolContext(hub=hub, browser_url=config.server.browser_url, mode="http")
    server = create_server(context)
    http_app = create_http_app(server, hub, config.server.static_dir)

    logger.info("Starting hello3d MCP server in HTTP mode")
    logger.info("MCP endpoint on http://%s:%d/mcp", config.server.host, config.server.mcp_port)
    logger.info("Browser WebSocket on ws://%s:%d", config.server.host, config.server.ws_port)

    try:
        await _serve_until_first_exit(
            [
                _uvicorn_server(http_app, config.server.host, config.server.mcp_port),
                _uvicorn_server(create_browser_app(hub), config.server.host, config.server.ws_port),
            ]
        )
    finally:
        hub.shutdown()
