"""Tracking session state machine.

Two states, ``OFF`` and ``ON``. The state is recovered from the durable
store on :meth:`TrackingStateMachine.load`, never assumed. While ``ON``, a
local refresh loop periodically projects the tracking status for display.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from pytracksync.config import TrackerConfig
from pytracksync.exceptions import NotEnrolledError, PermissionDeniedError
from pytracksync.location import LocationSource
from pytracksync.models import INACTIVE_SESSION, TrackingSession, TrackingState, TrackingStatus
from pytracksync.status import now_ms, project
from pytracksync.store import RecordStore
from pytracksync.uplink import SampleUplink

_logger = logging.getLogger(__name__)

RefreshCallback = Callable[[TrackingStatus], None]


class TrackingStateMachine:
    """Owns the ``trackingStart`` record.

    Parameters
    ----------
    config : TrackerConfig
        Client configuration.
    records : RecordStore
        Typed durable store.
    location_source : LocationSource
        Platform location service; started and stopped with the session.
    uplink : SampleUplink
        Owner of the last known fix, cleared when tracking turns off.
    clock : callable
        Returns the current epoch time in milliseconds.
    on_refresh : callable or None
        Receives a fresh :class:`TrackingStatus` every
        ``config.refresh_interval`` seconds while tracking is on.
    """

    def __init__(
        self,
        config: TrackerConfig,
        records: RecordStore,
        location_source: LocationSource,
        uplink: SampleUplink,
        *,
        clock: Callable[[], int] = now_ms,
        on_refresh: RefreshCallback | None = None,
    ) -> None:
        self._config = config
        self._records = records
        self._location_source = location_source
        self._uplink = uplink
        self._clock = clock
        self._on_refresh = on_refresh
        self._session: TrackingSession = INACTIVE_SESSION
        self._refresh_task: asyncio.Task[None] | None = None
        self._lock = asyncio.Lock()

    @property
    def session(self) -> TrackingSession:
        return self._session

    @property
    def state(self) -> TrackingState:
        return self._session.state

    @property
    def is_refreshing(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    async def load(self) -> TrackingSession:
        """Recover the session from the store and resume refreshing if it is on."""
        async with self._lock:
            self._session = await self._records.load_session()
            if self._session.active:
                _logger.info("Resuming tracking session started at %s", self._session.started_at_ms)
                self._start_refresh()
            return self._session

    async def turn_on(self) -> TrackingSession:
        """Start tracking.

        Calling this while already ``ON`` keeps the original start time.

        Raises
        ------
        NotEnrolledError
            If the device has no persisted identity.
        PermissionDeniedError
            If foreground or background location access is not granted.
        PersistenceError
            If the session cannot be stored.
        """
        async with self._lock:
            current = await self._records.load_session()
            if current.active:
                self._session = current
                _logger.debug("turn_on ignored: already tracking since %s", self._session.started_at_ms)
                self._start_refresh()
                return self._session

            if await self._records.load_identity() is None:
                raise NotEnrolledError("Device must be enrolled before tracking can start")

            permissions = await self._location_source.get_permissions()
            if not permissions.granted:
                raise PermissionDeniedError(
                    f"Location access not granted (foreground={permissions.foreground}, "
                    f"background={permissions.background})"
                )

            session = TrackingSession.started(self._clock())
            await self._records.save_session(session)
            try:
                await self._location_source.start_background_delivery(self._config.background_interval)
            except Exception:
                _logger.warning("Background delivery failed to start, rolling back session", exc_info=True)
                await self._records.delete_session()
                raise

            self._session = session
            self._start_refresh()
            _logger.info("Tracking turned on at %s", session.started_at_ms)
            return session

    async def turn_off(self) -> None:
        """Stop tracking. A no-op when already ``OFF``.

        Raises
        ------
        PersistenceError
            If the session or last known fix cannot be removed.  The
            persisted session is left as it was before the call.
        """
        async with self._lock:
            previous = await self._records.load_session()
            if not previous.active and not self._session.active:
                await self._stop_refresh()
                return

            await self._location_source.stop_background_delivery()
            try:
                await self._records.delete_session()
                await self._uplink.reset()
            except Exception:
                await self._restore(previous)
                raise

            self._session = INACTIVE_SESSION
            await self._stop_refresh()
            _logger.info("Tracking turned off")

    async def _restore(self, previous: TrackingSession) -> None:
        """Best-effort return to *previous* after a failed ``turn_off``.

        Failures are logged and swallowed so the caller re-raises the
        error that caused the rollback.
        """
        try:
            await self._records.save_session(previous)
            if previous.active:
                await self._location_source.start_background_delivery(self._config.background_interval)
        except Exception:
            _logger.error("Could not restore tracking session after failed turn_off", exc_info=True)

    async def status(self, now: int | None = None) -> TrackingStatus:
        """Project the current status at *now* (defaults to the clock)."""
        last_fix = await self._uplink.last_fix()
        return project(self._clock() if now is None else now, self._session, last_fix)

    async def shutdown(self) -> None:
        """Stop the local refresh loop without touching persisted state."""
        await self._stop_refresh()

    # ------------------------------------------------------------------
    # Local refresh loop
    # ------------------------------------------------------------------

    def _start_refresh(self) -> None:
        if self.is_refreshing:
            return
        self._refresh_task = asyncio.create_task(self._refresh_loop(), name="pytracksync-refresh")

    async def _stop_refresh(self) -> None:
        task = self._refresh_task
        self._refresh_task = None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _refresh_loop(self) -> None:
        while True:
            if self._on_refresh is not None:
                try:
                    self._on_refresh(await self.status())
                except Exception:
                    _logger.warning("Status refresh failed", exc_info=True)
            await asyncio.sleep(self._config.refresh_interval)
