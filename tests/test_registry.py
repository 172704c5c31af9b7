from conftest import FakeConnection

from hello3d_mcp.bridge.registry import TransportRegistry


def test_register_and_lookup():
    registry = TransportRegistry()
    conn = FakeConnection()
    assert registry.register("s1", conn) is None
    assert registry.lookup("s1") is conn
    assert conn.session_id == "s1"


def test_lookup_unknown_or_closed_is_none():
    registry = TransportRegistry()
    conn = FakeConnection()
    registry.register("s1", conn)
    assert registry.lookup("nope") is None
    conn.close()
    assert registry.lookup("s1") is None


def test_last_registration_wins():
    registry = TransportRegistry()
    first, second = FakeConnection(), FakeConnection()
    registry.register("s1", first)
    superseded = registry.register("s1", second)
    assert superseded is first
    assert registry.lookup("s1") is second
    assert len(registry) == 1


def test_unregister_superseded_connection_keeps_new_binding():
    registry = TransportRegistry()
    first, second = FakeConnection(), FakeConnection()
    registry.register("s1", first)
    registry.register("s1", second)
    assert registry.unregister(first) is None
    assert registry.lookup("s1") is second
    assert registry.unregister(second) == "s1"
    assert registry.lookup("s1") is None


def test_reregistering_under_new_id_drops_old_binding():
    registry = TransportRegistry()
    conn = FakeConnection()
    registry.register("old", conn)
    registry.register("new", conn)
    assert registry.lookup("old") is None
    assert registry.lookup("new") is conn
    assert registry.session_ids() == ["new"]


def test_registering_same_connection_twice_supersedes_nothing():
    registry = TransportRegistry()
    conn = FakeConnection()
    registry.register("s1", conn)
    assert registry.register("s1", conn) is None
