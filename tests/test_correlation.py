import asyncio

import pytest

from conftest import FakeConnection

from hello3d_mcp.bridge.correlation import CorrelationTable
from hello3d_mcp.shared.errors import QueryTimeout, StateQueryFailed, TransportLost


@pytest.mark.asyncio
async def test_resolve_settles_future_and_removes_entry():
    table = CorrelationTable()
    request_id, future = table.issue("s1", FakeConnection())
    assert request_id in table
    assert table.resolve(request_id, {"ok": True}) is True
    assert await future == {"ok": True}
    assert request_id not in table


@pytest.mark.asyncio
async def test_reject_raises_in_waiter():
    table = CorrelationTable()
    request_id, future = table.issue("s1", FakeConnection())
    table.reject(request_id, StateQueryFailed("nope"))
    with pytest.raises(StateQueryFailed):
        await future
    assert len(table) == 0


@pytest.mark.asyncio
async def test_request_ids_are_distinct():
    table = CorrelationTable()
    conn = FakeConnection()
    first, _ = table.issue("s1", conn)
    second, _ = table.issue("s1", conn)
    assert first != second
    assert table.pending_for("s1") == 2
    table.resolve(first, {})
    table.resolve(second, {})
    assert len(table) == 0


@pytest.mark.asyncio
async def test_timeout_rejects_and_late_reply_is_noop():
    table = CorrelationTable(default_timeout_ms=20)
    request_id, future = table.issue("s1", FakeConnection())
    with pytest.raises(QueryTimeout):
        await future
    assert request_id not in table
    assert table.resolve(request_id, {"late": True}) is False
    assert table.reject(request_id, StateQueryFailed("late")) is False


@pytest.mark.asyncio
async def test_cancel_all_for_only_touches_that_connection():
    table = CorrelationTable()
    lost, kept = FakeConnection(), FakeConnection()
    doomed = [table.issue("s1", lost)[1] for _ in range(3)]
    survivor_id, survivor = table.issue("s2", kept)

    assert table.cancel_all_for(lost, TransportLost("Browser disconnected")) == 3
    for future in doomed:
        assert future.done()
        with pytest.raises(TransportLost):
            future.result()
    assert not survivor.done()
    assert survivor_id in table
    table.resolve(survivor_id, {})


@pytest.mark.asyncio
async def test_cancelled_waiter_leaves_table():
    table = CorrelationTable(default_timeout_ms=5000)
    request_id, future = table.issue("s1", FakeConnection())
    future.cancel()
    await asyncio.sleep(0)
    assert request_id not in table
