"""WebSocket endpoint the 3D browser client connects to."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from fastapi import APIRouter, FastAPI, WebSocket

from .hub import BrowserHub
from .registry import WebSocketConnection

logger = logging.getLogger(__name__)

router = APIRouter()


async def _serve_browser(websocket: WebSocket) -> None:
    hub: BrowserHub = websocket.app.state.hub
    await websocket.accept()
    connection = WebSocketConnection(websocket)
    pump = asyncio.create_task(connection.pump())
    logger.info("Browser client connected")
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            # Browsers may send JSON as text or binary frames.
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw is None:
                continue
            try:
                hub.handle_message(connection, raw)
            except Exception:
                logger.exception("Unexpected error handling browser frame (session: %s)", connection.session_id)
    finally:
        hub.disconnect(connection)
        connection.close()
        try:
            await asyncio.wait_for(pump, timeout=1.0)
        except asyncio.TimeoutError:
            pump.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await pump


@router.websocket("/")
async def browser_socket(websocket: WebSocket) -> None:
    await _serve_browser(websocket)


@router.websocket("/ws")
async def browser_socket_ws(websocket: WebSocket) -> None:
    await _serve_browser(websocket)


def create_browser_app(hub: BrowserHub) -> FastAPI:
    app = FastAPI(title="hello3d browser bridge")
    app.state.hub = hub
    app.include_router(router)
    return app
