"""High-level async client wiring the tracking core together."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

import aiohttp

from pytracksync._transport import JsonTransport, Transport
from pytracksync.config import TrackerConfig
from pytracksync.enrollment import EnrollmentManager
from pytracksync.exceptions import TrackerError
from pytracksync.location import LocationSource, request_permissions
from pytracksync.models import (
    DeviceIdentity,
    LocationFix,
    PermissionState,
    TrackingSession,
    TrackingState,
    TrackingStatus,
)
from pytracksync.status import now_ms
from pytracksync.store import JsonFileStore, KeyValueStore, MemoryStore, RecordStore
from pytracksync.tracking import RefreshCallback, TrackingStateMachine
from pytracksync.uplink import SampleUplink

_logger = logging.getLogger(__name__)


class TrackerClient:
    """Async entry point for the on-device tracking core.

    Usage::

        async with TrackerClient(config, location_source) as client:
            await client.ensure_enrolled()
            await client.request_permissions()
            await client.turn_on()

    Entering the context recovers the persisted session, so a session that
    was on before a restart resumes its local refresh loop.
    """

    def __init__(
        self,
        config: TrackerConfig,
        location_source: LocationSource,
        *,
        store: KeyValueStore | None = None,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        clock: Callable[[], int] = now_ms,
        on_refresh: RefreshCallback | None = None,
    ) -> None:
        self._config = config
        self._location_source = location_source
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._clock = clock
        self._on_refresh = on_refresh
        if store is None:
            store = JsonFileStore(config.store_path) if config.store_path else MemoryStore()
        self._records = RecordStore(store)
        self._enrollment: EnrollmentManager | None = None
        self._uplink: SampleUplink | None = None
        self._tracking: TrackingStateMachine | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TrackerClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = JsonTransport(self._config, self._http_session)

        self._enrollment = EnrollmentManager(self._config, self._transport, self._records)
        self._uplink = SampleUplink(self._config, self._transport, self._records, self._location_source)
        self._tracking = TrackingStateMachine(
            self._config,
            self._records,
            self._location_source,
            self._uplink,
            clock=self._clock,
            on_refresh=self._on_refresh,
        )
        try:
            await self._tracking.load()
        except BaseException:
            await self.__aexit__(None, None, None)
            raise
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._tracking is not None:
            await self._tracking.shutdown()
        if self._uplink is not None:
            await self._uplink.drain()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._enrollment = None
        self._uplink = None
        self._tracking = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_enrollment(self) -> EnrollmentManager:
        if self._enrollment is None:
            raise TrackerError("Client not initialized. Use 'async with TrackerClient(...) as client:'")
        return self._enrollment

    def _require_uplink(self) -> SampleUplink:
        if self._uplink is None:
            raise TrackerError("Client not initialized. Use 'async with TrackerClient(...) as client:'")
        return self._uplink

    def _require_tracking(self) -> TrackingStateMachine:
        if self._tracking is None:
            raise TrackerError("Client not initialized. Use 'async with TrackerClient(...) as client:'")
        return self._tracking

    # ------------------------------------------------------------------
    # Enrollment & permissions
    # ------------------------------------------------------------------

    async def ensure_enrolled(self) -> DeviceIdentity:
        """Return the device identity, registering once if needed."""
        return await self._require_enrollment().ensure_enrolled()

    async def identity(self) -> DeviceIdentity | None:
        return await self._require_enrollment().identity()

    async def request_permissions(self) -> PermissionState:
        """Request foreground then background location access."""
        return await request_permissions(self._location_source)

    # ------------------------------------------------------------------
    # Tracking session
    # ------------------------------------------------------------------

    @property
    def state(self) -> TrackingState:
        return self._require_tracking().state

    @property
    def session(self) -> TrackingSession:
        return self._require_tracking().session

    async def turn_on(self) -> TrackingSession:
        return await self._require_tracking().turn_on()

    async def turn_off(self) -> None:
        await self._require_tracking().turn_off()

    async def status(self, now: int | None = None) -> TrackingStatus:
        """Project elapsed times and last coordinates at *now* (epoch ms)."""
        return await self._require_tracking().status(now)

    # ------------------------------------------------------------------
    # Location samples
    # ------------------------------------------------------------------

    async def on_fix(self, fix: LocationFix) -> None:
        """Entry point for the location source's background callback."""
        await self._require_uplink().on_fix(fix)

    async def on_fixes(self, fixes: Iterable[LocationFix]) -> None:
        await self._require_uplink().on_fixes(fixes)

    async def query_current_fix(self) -> LocationFix:
        """Poll the location source once and record the fix."""
        return await self._require_uplink().query_current_fix()

    async def last_fix(self) -> LocationFix | None:
        return await self._require_uplink().last_fix()

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def factory_reset(self) -> None:
        """Turn tracking off and clear every persisted record, identity included."""
        await self._require_tracking().turn_off()
        await self._require_uplink().reset()
        await self._require_enrollment().forget()
        _logger.info("Persistent tracking state cleared")
