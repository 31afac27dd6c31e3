from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from _fakes import Clock, FakeBackend, FakeLocationSource, fix

from pytracksync.client import TrackerClient
from pytracksync.config import TrackerConfig
from pytracksync.exceptions import PersistenceError, RegistrationError, TrackerError
from pytracksync.models import TrackingState
from pytracksync.store import JsonFileStore, MemoryStore, RecordStore
from pytracksync.uplink import SampleUplink


def _client(
    store: Any,
    *,
    backend: FakeBackend | None = None,
    source: FakeLocationSource | None = None,
    clock: Clock | None = None,
) -> TrackerClient:
    return TrackerClient(
        TrackerConfig(refresh_interval=0.01),
        source or FakeLocationSource(),
        store=store,
        transport=backend or FakeBackend(),
        clock=clock or Clock(),
    )


@pytest.mark.asyncio
async def test_tracking_scenario() -> None:
    clock = Clock(0)
    backend = FakeBackend()

    async with _client(MemoryStore(), backend=backend, clock=clock) as client:
        status = await client.status(now=0)
        assert status.elapsed_since_start is None
        assert status.elapsed_since_last_ping is None

        await client.ensure_enrolled()
        clock.now = 1_000
        await client.turn_on()
        assert (await client.status(now=4_000)).elapsed_since_start == 3

        await client.on_fix(fix(10.0, 20.0, 4_500))
        status = await client.status(now=6_500)
        assert status.elapsed_since_last_ping == 2
        assert status.latitude == 10.0
        assert status.longitude == 20.0

        await client.turn_off()

    assert len(backend.calls_to("/device")) == 1
    assert len(backend.calls_to("/location")) == 1


@pytest.mark.asyncio
async def test_restart_recovers_session_from_file(tmp_path: Path) -> None:
    path = tmp_path / "state.json"

    async with _client(JsonFileStore(path), clock=Clock(1_000)) as client:
        await client.ensure_enrolled()
        await client.turn_on()

    async with _client(JsonFileStore(path), clock=Clock(61_000)) as restarted:
        assert restarted.state == TrackingState.ON
        assert (await restarted.status()).elapsed_since_start == 60
        await restarted.turn_off()
        assert restarted.state == TrackingState.OFF


@pytest.mark.asyncio
async def test_factory_reset_clears_all_records() -> None:
    store = MemoryStore()
    backend = FakeBackend()

    async with _client(store, backend=backend, clock=Clock(1_000)) as client:
        await client.ensure_enrolled()
        await client.turn_on()
        await client.on_fix(fix(1.0, 2.0, 1_200))

        await client.factory_reset()

        assert store.snapshot() == {}
        assert client.state == TrackingState.OFF
        assert await client.identity() is None

        await client.ensure_enrolled()

    assert len(backend.calls_to("/device")) == 2


@pytest.mark.asyncio
async def test_query_current_fix_through_client() -> None:
    source = FakeLocationSource(current_fix=fix(5.0, 6.0, 2_000))

    async with _client(MemoryStore(), source=source, clock=Clock(3_000)) as client:
        await client.ensure_enrolled()
        await client.query_current_fix()
        assert await client.last_fix() == fix(5.0, 6.0, 2_000)
        assert (await client.status()).elapsed_since_last_ping == 1


@pytest.mark.asyncio
async def test_request_permissions_through_client() -> None:
    source = FakeLocationSource()
    async with _client(MemoryStore(), source=source) as client:
        assert (await client.request_permissions()).granted


@pytest.mark.asyncio
async def test_methods_require_context() -> None:
    client = _client(MemoryStore())
    with pytest.raises(TrackerError):
        await client.turn_on()


@pytest.mark.asyncio
async def test_unreadable_store_on_enter_closes_owned_http_session(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    client = TrackerClient(TrackerConfig(store_path=str(path)), FakeLocationSource())

    with pytest.raises(PersistenceError):
        await client.__aenter__()

    assert client._http_session is None  # noqa: SLF001
    with pytest.raises(TrackerError):
        await client.turn_on()


@pytest.mark.asyncio
async def test_background_uplink_fix_is_visible_to_client(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    config = TrackerConfig(refresh_interval=0.01)

    async with _client(JsonFileStore(path), clock=Clock(1_000)) as client:
        await client.ensure_enrolled()
        await client.turn_on()

        # Background delivery runs against its own store instance on the same file.
        background = SampleUplink(config, FakeBackend(), RecordStore(JsonFileStore(path)))  # type: ignore[arg-type]
        await background.on_fix(fix(10.0, 20.0, 4_000))
        await background.on_fix(fix(11.0, 21.0, 3_000))
        await background.drain()

        status = await client.status(now=6_000)
        assert status.elapsed_since_start == 5
        assert status.elapsed_since_last_ping == 2
        assert (status.latitude, status.longitude) == (10.0, 20.0)

        await client.on_fix(fix(12.0, 22.0, 3_500))
        assert await client.last_fix() == fix(10.0, 20.0, 4_000)
        assert client.state == TrackingState.ON


# ------------------------------------------------------------------
# Real HTTP through JsonTransport
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_enrollment_and_uplink_over_http() -> None:
    from aiohttp import web
    from aiohttp.test_utils import TestServer

    received: dict[str, list[dict[str, Any]]] = {"device": [], "location": []}

    async def register(request: web.Request) -> web.Response:
        received["device"].append(await request.json())
        return web.json_response({"deviceID": "http-device"})

    async def location(request: web.Request) -> web.Response:
        received["location"].append(await request.json())
        return web.Response(status=204)

    app = web.Application()
    app.router.add_post("/device", register)
    app.router.add_post("/location", location)

    async with TestServer(app) as server:
        config = TrackerConfig(base_url=str(server.make_url("/")), request_timeout=5.0)
        async with TrackerClient(config, FakeLocationSource(), store=MemoryStore(), clock=Clock(1_000)) as client:
            identity = await client.ensure_enrolled()
            await client.on_fix(fix(10.0, 20.0, 900))

    assert identity.id == "http-device"
    assert received["device"] == [{"secret": identity.secret}]
    assert received["location"] == [
        {"deviceID": "http-device", "secret": identity.secret, "latitude": 10.0, "longitude": 20.0, "timestamp": 900}
    ]


@pytest.mark.asyncio
async def test_registry_http_error_surfaces_as_registration_error() -> None:
    from aiohttp import web
    from aiohttp.test_utils import TestServer

    async def register(_request: web.Request) -> web.Response:
        return web.Response(status=500, text="boom")

    app = web.Application()
    app.router.add_post("/device", register)

    store = MemoryStore()
    async with TestServer(app) as server:
        config = TrackerConfig(base_url=str(server.make_url("/")))
        async with TrackerClient(config, FakeLocationSource(), store=store) as client:
            with pytest.raises(RegistrationError) as excinfo:
                await client.ensure_enrolled()

    assert excinfo.value.status_code == 500
    assert store.snapshot() == {}
