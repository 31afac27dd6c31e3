from __future__ import annotations

import logging

import pytest
from _fakes import FakeBackend, FakeLocationSource, fix

from pytracksync.config import TrackerConfig
from pytracksync.exceptions import TrackerError
from pytracksync.store import MemoryStore, RecordStore
from pytracksync.uplink import SampleUplink

_ENROLLED = {"device": {"deviceID": "dev-1", "secret": "abc123"}}


def _uplink(
    backend: FakeBackend,
    store: MemoryStore,
    source: FakeLocationSource | None = None,
) -> SampleUplink:
    return SampleUplink(TrackerConfig(), backend, RecordStore(store), source)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_fix_is_delivered_once_and_recorded() -> None:
    backend = FakeBackend()
    store = MemoryStore(_ENROLLED)
    uplink = _uplink(backend, store)

    await uplink.on_fix(fix(10.0, 20.0, 4_500))
    await uplink.drain()

    assert backend.calls_to("/location") == [
        {"deviceID": "dev-1", "secret": "abc123", "latitude": 10.0, "longitude": 20.0, "timestamp": 4_500}
    ]
    assert await store.get("location") == {"latestLat": 10.0, "latestLong": 20.0, "locationTimestamp": 4_500}
    assert uplink.pending_deliveries == 0


@pytest.mark.asyncio
async def test_out_of_order_fix_does_not_overwrite() -> None:
    backend = FakeBackend()
    uplink = _uplink(backend, MemoryStore(_ENROLLED))

    await uplink.on_fix(fix(1.0, 1.0, 100))
    await uplink.on_fix(fix(2.0, 2.0, 50))
    await uplink.drain()

    assert await uplink.last_fix() == fix(1.0, 1.0, 100)
    assert len(backend.calls_to("/location")) == 2


@pytest.mark.asyncio
async def test_equal_timestamp_overwrites() -> None:
    uplink = _uplink(FakeBackend(), MemoryStore(_ENROLLED))

    await uplink.on_fix(fix(1.0, 1.0, 100))
    await uplink.on_fix(fix(2.0, 2.0, 100))
    await uplink.drain()

    assert await uplink.last_fix() == fix(2.0, 2.0, 100)


@pytest.mark.asyncio
async def test_persisted_fix_orders_incoming_fixes() -> None:
    store = MemoryStore({**_ENROLLED, "location": {"latestLat": 5.0, "latestLong": 6.0, "locationTimestamp": 900}})
    uplink = _uplink(FakeBackend(), store)

    await uplink.on_fix(fix(1.0, 1.0, 800))
    await uplink.drain()

    assert await uplink.last_fix() == fix(5.0, 6.0, 900)


@pytest.mark.asyncio
async def test_fix_without_identity_is_dropped(caplog: pytest.LogCaptureFixture) -> None:
    backend = FakeBackend()
    store = MemoryStore()
    uplink = _uplink(backend, store)

    with caplog.at_level(logging.ERROR, logger="pytracksync.uplink"):
        await uplink.on_fix(fix(1.0, 1.0, 100))
    await uplink.drain()

    assert backend.calls == []
    assert await store.get("location") is None
    assert "not enrolled" in caplog.text


@pytest.mark.asyncio
async def test_delivery_failure_still_records_fix(caplog: pytest.LogCaptureFixture) -> None:
    backend = FakeBackend(fail_endpoints={"/location": 500})
    uplink = _uplink(backend, MemoryStore(_ENROLLED))

    with caplog.at_level(logging.WARNING, logger="pytracksync.uplink"):
        await uplink.on_fix(fix(3.0, 4.0, 700))
        await uplink.drain()

    assert await uplink.last_fix() == fix(3.0, 4.0, 700)
    assert len(backend.calls_to("/location")) == 1
    assert "Location delivery failed" in caplog.text


@pytest.mark.asyncio
async def test_batch_is_processed_oldest_first() -> None:
    backend = FakeBackend()
    uplink = _uplink(backend, MemoryStore(_ENROLLED))

    await uplink.on_fixes([fix(3.0, 3.0, 300), fix(1.0, 1.0, 100), fix(2.0, 2.0, 200)])
    await uplink.drain()

    assert await uplink.last_fix() == fix(3.0, 3.0, 300)
    assert sorted(p["timestamp"] for p in backend.calls_to("/location")) == [100, 200, 300]


@pytest.mark.asyncio
async def test_query_current_fix_records_polled_fix() -> None:
    source = FakeLocationSource(current_fix=fix(7.0, 8.0, 1_000))
    uplink = _uplink(FakeBackend(), MemoryStore(_ENROLLED), source)

    result = await uplink.query_current_fix()
    await uplink.drain()

    assert result == fix(7.0, 8.0, 1_000)
    assert await uplink.last_fix() == result


@pytest.mark.asyncio
async def test_reset_clears_fix_and_ordering() -> None:
    uplink = _uplink(FakeBackend(), MemoryStore(_ENROLLED))
    await uplink.on_fix(fix(1.0, 1.0, 500))

    await uplink.reset()
    await uplink.on_fix(fix(2.0, 2.0, 100))
    await uplink.drain()

    assert await uplink.last_fix() == fix(2.0, 2.0, 100)


@pytest.mark.asyncio
async def test_query_without_location_source_raises_tracker_error() -> None:
    uplink = _uplink(FakeBackend(), MemoryStore(_ENROLLED))

    with pytest.raises(TrackerError, match="No location source"):
        await uplink.query_current_fix()


@pytest.mark.asyncio
async def test_fix_written_by_another_uplink_is_respected() -> None:
    store = MemoryStore(_ENROLLED)
    foreground = _uplink(FakeBackend(), store)
    background = _uplink(FakeBackend(), store)

    await foreground.on_fix(fix(1.0, 1.0, 100))
    await background.on_fix(fix(2.0, 2.0, 500))
    await foreground.on_fix(fix(3.0, 3.0, 300))
    await foreground.drain()
    await background.drain()

    assert await foreground.last_fix() == fix(2.0, 2.0, 500)
