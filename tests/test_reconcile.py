import asyncio

import pytest

from conftest import FakeConnection, frame, register

from hello3d_mcp.bridge.reconcile import FALLBACK_NOTE, StateReading, format_reading
from hello3d_mcp.bridge.state_cache import Provenance
from hello3d_mcp.shared.errors import StateUnavailable


async def _answer_next_query(hub, connection, state):
    await asyncio.sleep(0)
    request = connection.of_type("requestState")[-1]
    hub.handle_message(connection, frame(type="stateResponse", requestId=request["requestId"], state=state))
    return request


@pytest.mark.asyncio
async def test_cache_hit_returns_same_object_without_traffic(hub, browser):
    state = {"model": {"color": "#ff0000"}}
    hub.cache.store("s1", state, Provenance.FRESH)
    sent_before = len(browser.sent)

    first = await hub.reconciler.get_state("s1")
    second = await hub.reconciler.get_state("s1")

    assert first.state is state
    assert second.state is state
    assert first.source is Provenance.CACHE
    assert len(browser.sent) == sent_before


@pytest.mark.asyncio
async def test_pushed_snapshot_keeps_its_provenance(hub, browser):
    hub.handle_message(browser, frame(type="stateUpdate", state={"background": "#112233"}, timestamp=1_700_000_000_000))
    reading = await hub.reconciler.get_state("s1")
    assert reading.source is Provenance.PUSHED
    assert reading.captured_at.year == 2023
    assert reading.note


@pytest.mark.asyncio
async def test_force_refresh_issues_exactly_one_query(hub, browser):
    hub.cache.store("s1", {"model": {"color": "#ff0000"}}, Provenance.FRESH)
    task = asyncio.create_task(hub.reconciler.get_state("s1", force_refresh=True))
    request = await _answer_next_query(hub, browser, {"model": {"color": "#00ff00"}})
    reading = await task

    assert request["forceRefresh"] is True
    assert len(browser.of_type("requestState")) == 1
    assert reading.source is Provenance.FRESH
    assert reading.state == {"model": {"color": "#00ff00"}}
    assert hub.cache.get("s1").state == {"model": {"color": "#00ff00"}}
    assert hub.cache.get("s1").provenance is Provenance.FRESH


@pytest.mark.asyncio
async def test_cache_miss_queries_live_without_forcing(hub, browser):
    task = asyncio.create_task(hub.reconciler.get_state("s1"))
    request = await _answer_next_query(hub, browser, {"background": "#000000"})
    reading = await task
    assert request["forceRefresh"] is False
    assert reading.source is Provenance.FRESH


@pytest.mark.asyncio
async def test_timeout_falls_back_to_cache(hub, browser):
    cached = {"model": {"color": "#ff0000"}}
    hub.cache.store("s1", cached, Provenance.FRESH)
    reading = await hub.reconciler.get_state("s1", force_refresh=True)
    assert reading.source is Provenance.CACHE
    assert reading.state is cached
    assert reading.note == FALLBACK_NOTE


@pytest.mark.asyncio
async def test_timeout_without_cache_raises(hub, browser):
    with pytest.raises(StateUnavailable) as exc:
        await hub.reconciler.get_state("s1", force_refresh=True)
    assert "State query timeout" in str(exc.value)
    assert len(hub.pending) == 0


@pytest.mark.asyncio
async def test_no_route_without_cache_raises_and_starts_no_timer(hub):
    with pytest.raises(StateUnavailable) as exc:
        await hub.reconciler.get_state("s3", force_refresh=True)
    assert "not connected" in str(exc.value)
    assert len(hub.pending) == 0


@pytest.mark.asyncio
async def test_disconnect_rejects_pending_query_immediately(hub, browser):
    task = asyncio.create_task(hub.reconciler.query_live("s1"))
    await asyncio.sleep(0)
    assert len(hub.pending) == 1

    hub.disconnect(browser)
    done, _ = await asyncio.wait({task}, timeout=0.05)

    assert task in done
    assert "disconnected" in str(task.exception())
    assert len(hub.pending) == 0


@pytest.mark.asyncio
async def test_disconnect_cascades_to_every_outstanding_query(hub, browser):
    tasks = [asyncio.create_task(hub.reconciler.get_state("s1", force_refresh=True)) for _ in range(3)]
    await asyncio.sleep(0)
    assert len(hub.pending) == 3
    assert len({m["requestId"] for m in browser.of_type("requestState")}) == 3

    hub.disconnect(browser)
    results = await asyncio.wait_for(asyncio.gather(*tasks, return_exceptions=True), timeout=0.05)
    assert all(isinstance(result, StateUnavailable) for result in results)


@pytest.mark.asyncio
async def test_stale_reply_after_timeout_is_ignored(hub, browser):
    hub.cache.store("s1", {"background": "#000000"}, Provenance.FRESH)
    reading = await hub.reconciler.get_state("s1", force_refresh=True)
    assert reading.source is Provenance.CACHE

    late = browser.of_type("requestState")[-1]["requestId"]
    hub.handle_message(browser, frame(type="stateResponse", requestId=late, state={"background": "#ffffff"}))

    assert hub.cache.get("s1").state == {"background": "#000000"}


@pytest.mark.asyncio
async def test_concurrent_refreshes_are_correlated_independently(hub, browser):
    first = asyncio.create_task(hub.reconciler.get_state("s1", force_refresh=True))
    second = asyncio.create_task(hub.reconciler.get_state("s1", force_refresh=True))
    await asyncio.sleep(0)
    one, two = [m["requestId"] for m in browser.of_type("requestState")]

    hub.handle_message(browser, frame(type="stateResponse", requestId=two, state={"n": 2}))
    hub.handle_message(browser, frame(type="stateResponse", requestId=one, state={"n": 1}))

    assert (await first).state == {"n": 1}
    assert (await second).state == {"n": 2}


@pytest.mark.asyncio
async def test_superseded_connection_closing_leaves_new_binding_alone(hub, browser):
    replacement = register(hub, FakeConnection(), "s1")
    hub.cache.store("s1", {"background": "#123456"}, Provenance.FRESH)

    hub.disconnect(browser)

    assert hub.registry.lookup("s1") is replacement
    assert "s1" in hub.cache


def test_format_reading():
    from datetime import datetime, timezone

    reading = StateReading(
        state={},
        source=Provenance.FRESH,
        captured_at=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    )
    text = format_reading("Model color", "#ff0000", reading)
    assert text == "Model color: #ff0000 (queried at 2024-01-02T03:04:05+00:00, source: fresh)"

    noted = StateReading(state={}, source=Provenance.CACHE, captured_at=reading.captured_at, note="stale")
    assert format_reading("X", 1, noted).endswith("source: cache, stale)")
