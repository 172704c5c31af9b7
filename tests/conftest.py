import json

import pytest

from hello3d_mcp.bridge.hub import BrowserHub
from hello3d_mcp.sessions import AmbientSessionResolver, ScopedSessionResolver
from hello3d_mcp.shared.config import BridgeConfig
from hello3d_mcp.tools.base import ToolContext


class FakeConnection:
    """Records what would have been written to a browser."""

    def __init__(self, accept_writes=True):
        self.session_id = None
        self.sent = []
        self.closed = False
        self._open = True
        self._accept_writes = accept_writes

    @property
    def is_open(self):
        return self._open

    def send(self, message):
        if not self._open or not self._accept_writes:
            return False
        self.sent.append(dict(message))
        return True

    def close(self):
        self._open = False
        self.closed = True

    def of_type(self, message_type):
        return [message for message in self.sent if message["type"] == message_type]


def frame(**message):
    return json.dumps(message)


def register(hub, connection, session_id):
    hub.handle_message(connection, frame(type="registerSession", sessionId=session_id))
    return connection


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    for name in (
        "MCP_PORT",
        "WS_PORT",
        "BROWSER_URL",
        "HELLO3D_HOST",
        "HELLO3D_TRANSPORT",
        "HELLO3D_STATE_TIMEOUT_MS",
        "HELLO3D_LOG_LEVEL",
        "HELLO3D_LOG_FILE",
        "HELLO3D_CONFIG",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def hub():
    return BrowserHub(AmbientSessionResolver("s1"), BridgeConfig(state_query_timeout_ms=100))


@pytest.fixture
def scoped_hub():
    return BrowserHub(ScopedSessionResolver(), BridgeConfig(state_query_timeout_ms=100))


@pytest.fixture
def browser(hub):
    return register(hub, FakeConnection(), "s1")


@pytest.fixture
def context(hub):
    return ToolContext(hub=hub, browser_url="http://localhost:5173", mode="stdio")
