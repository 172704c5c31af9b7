import asyncio

import pytest

from conftest import FakeConnection, frame, register

from hello3d_mcp.bridge.state_cache import Provenance
from hello3d_mcp.protocol import UNREGISTERED_MESSAGE
from hello3d_mcp.sessions import SessionStatus
from hello3d_mcp.shared.errors import MalformedReply, StateQueryFailed, TransportLost


def test_register_acks_and_binds(hub):
    conn = register(hub, FakeConnection(), "s1")
    assert conn.sent == [{"type": "sessionRegistered", "sessionId": "s1"}]
    assert hub.registry.lookup("s1") is conn
    assert hub.sessions.get_session("s1").status is SessionStatus.TRANSPORT_BOUND


def test_register_without_session_id_is_an_error(hub):
    conn = FakeConnection()
    hub.handle_message(conn, frame(type="registerSession"))
    assert conn.sent[0]["type"] == "error"
    assert len(hub.registry) == 0


def test_unregistered_client_is_told_to_register(hub):
    conn = FakeConnection()
    hub.handle_message(conn, frame(type="stateUpdate", state={}))
    assert conn.sent == [{"type": "error", "message": UNREGISTERED_MESSAGE}]
    assert len(hub.cache) == 0


def test_garbage_frame_gets_error_reply_and_keeps_connection(hub, browser):
    hub.handle_message(browser, "{not json")
    assert browser.sent[-1]["type"] == "error"
    assert hub.registry.lookup("s1") is browser


def test_state_update_is_cached_as_pushed(hub, browser):
    hub.handle_message(browser, frame(type="stateUpdate", state={"background": "#101010"}, timestamp=1_700_000_000_000))
    snapshot = hub.cache.get("s1")
    assert snapshot.state == {"background": "#101010"}
    assert snapshot.provenance is Provenance.PUSHED


def test_state_update_without_state_is_dropped(hub, browser):
    hub.handle_message(browser, frame(type="stateUpdate", state="oops"))
    assert "s1" not in hub.cache


@pytest.mark.asyncio
async def test_state_error_rejects_pending_query(hub, browser):
    task = asyncio.create_task(hub.reconciler.query_live("s1"))
    await asyncio.sleep(0)
    request_id = browser.of_type("requestState")[-1]["requestId"]
    hub.handle_message(browser, frame(type="stateError", requestId=request_id, error="scene not ready"))
    with pytest.raises(StateQueryFailed, match="scene not ready"):
        await task


@pytest.mark.asyncio
async def test_state_response_without_state_is_malformed(hub, browser):
    task = asyncio.create_task(hub.reconciler.query_live("s1"))
    await asyncio.sleep(0)
    request_id = browser.of_type("requestState")[-1]["requestId"]
    hub.handle_message(browser, frame(type="stateResponse", requestId=request_id))
    with pytest.raises(MalformedReply):
        await task


def test_reply_for_unknown_request_is_harmless(hub, browser):
    hub.handle_message(browser, frame(type="stateResponse", requestId="nope", state={}))
    hub.handle_message(browser, frame(type="stateError", requestId="nope", error="x"))
    assert len(hub.pending) == 0


def test_disconnect_evicts_cache_and_marks_session(hub, browser):
    hub.cache.store("s1", {}, Provenance.FRESH)
    hub.disconnect(browser)
    assert hub.registry.lookup("s1") is None
    assert "s1" not in hub.cache
    assert hub.sessions.get_session("s1").status is SessionStatus.TRANSPORT_LOST


@pytest.mark.asyncio
async def test_rebinding_fails_queries_sent_over_old_connection(hub, browser):
    task = asyncio.create_task(hub.reconciler.query_live("s1"))
    await asyncio.sleep(0)
    register(hub, FakeConnection(), "s1")
    with pytest.raises(TransportLost):
        await task


@pytest.mark.asyncio
async def test_shutdown_drains_everything(hub, browser):
    other = register(hub, FakeConnection(), "s2")
    task = asyncio.create_task(hub.reconciler.query_live("s1"))
    await asyncio.sleep(0)

    hub.shutdown()

    with pytest.raises(TransportLost):
        await task
    assert browser.closed and other.closed
    assert len(hub.registry) == 0
    assert len(hub.pending) == 0
