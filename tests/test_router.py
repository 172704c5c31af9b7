import logging

from conftest import FakeConnection

from hello3d_mcp.bridge.registry import TransportRegistry
from hello3d_mcp.bridge.router import CommandRouter
from hello3d_mcp.commands import Command, CommandType
from hello3d_mcp.sessions import AmbientSessionResolver, ScopedSessionResolver

RED = {"type": "changeColor", "color": "#ff0000"}


def _router(resolver=None, broadcast_fallback=True):
    registry = TransportRegistry()
    return registry, CommandRouter(registry, resolver or ScopedSessionResolver(), broadcast_fallback)


def test_send_delivers_exactly_once_to_bound_connection():
    registry, router = _router()
    conn = FakeConnection()
    registry.register("s1", conn)
    assert router.send("s1", RED) is True
    assert conn.sent == [RED]


def test_send_to_unknown_session_is_not_delivered():
    registry, router = _router()
    other = FakeConnection()
    registry.register("s1", other)
    assert router.send("s2", RED) is False
    assert other.sent == []


def test_routing_isolation_between_sessions():
    registry, router = _router()
    a, b = FakeConnection(), FakeConnection()
    registry.register("A", a)
    registry.register("B", b)
    router.send("A", Command.of(CommandType.CHANGE_SIZE, size=2))
    router.send("B", Command.of(CommandType.CHANGE_SIZE, size=3))
    assert a.sent == [{"type": "changeSize", "size": 2}]
    assert b.sent == [{"type": "changeSize", "size": 3}]


def test_send_reports_refused_write():
    registry, router = _router()
    registry.register("s1", FakeConnection(accept_writes=False))
    assert router.send("s1", RED) is False


def test_route_to_current_uses_ambient_session():
    registry, router = _router(AmbientSessionResolver("s1"))
    mine, theirs = FakeConnection(), FakeConnection()
    registry.register("s1", mine)
    registry.register("s2", theirs)
    assert router.route_to_current(RED) is True
    assert mine.sent == [RED]
    assert theirs.sent == []


def test_route_to_current_uses_bound_request_session():
    resolver = ScopedSessionResolver()
    registry, router = _router(resolver)
    mine, theirs = FakeConnection(), FakeConnection()
    registry.register("s1", mine)
    registry.register("s2", theirs)
    with resolver.bind("s2"):
        assert router.route_to_current(RED) is True
    assert theirs.sent == [RED]
    assert mine.sent == []


class _StartingUp(AmbientSessionResolver):
    """Single-session resolver whose id is not known yet."""

    def current_session(self):
        return None


def test_unresolved_ambient_session_broadcasts_as_degraded_fallback(caplog):
    registry, router = _router(_StartingUp())
    a, b = FakeConnection(), FakeConnection()
    registry.register("s1", a)
    registry.register("s2", b)
    with caplog.at_level(logging.WARNING):
        assert router.route_to_current(RED) is True
    assert a.sent == [RED]
    assert b.sent == [RED]
    assert "Degraded broadcast" in caplog.text


def test_unresolved_request_session_is_dropped_not_broadcast(caplog):
    registry, router = _router(ScopedSessionResolver())
    alice, bob = FakeConnection(), FakeConnection()
    registry.register("alice", alice)
    registry.register("bob", bob)
    with caplog.at_level(logging.WARNING):
        assert router.route_to_current(RED) is False
    assert alice.sent == []
    assert bob.sent == []
    assert "not routed" in caplog.text
    assert "Degraded broadcast" not in caplog.text


def test_unresolved_session_without_connections_is_dropped(caplog):
    _, router = _router(_StartingUp())
    with caplog.at_level(logging.WARNING):
        assert router.route_to_current(RED) is False
    assert "not routed" in caplog.text


def test_broadcast_fallback_can_be_disabled():
    registry, router = _router(_StartingUp(), broadcast_fallback=False)
    conn = FakeConnection()
    registry.register("s1", conn)
    assert router.route_to_current(RED) is False
    assert conn.sent == []
