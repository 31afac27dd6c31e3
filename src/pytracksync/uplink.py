"""Sample uplink.

Receives fixes from the location source's background delivery, hands each
one to the remote collector, and records it as the last known fix.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from pytracksync._api.collector import post_location
from pytracksync._transport import Transport
from pytracksync.config import TrackerConfig
from pytracksync.exceptions import DeliveryError, TrackerError
from pytracksync.location import LocationSource
from pytracksync.models import DeviceIdentity, LocationFix
from pytracksync.store import RecordStore

_logger = logging.getLogger(__name__)


class SampleUplink:
    """Owns the ``location`` record.

    Delivery is fire-and-forget: each accepted invocation schedules exactly
    one collector POST as a background task and never awaits or retries it.
    The local last-known fix is updated regardless of the delivery outcome,
    but never moves backwards in capture time.
    """

    def __init__(
        self,
        config: TrackerConfig,
        transport: Transport,
        records: RecordStore,
        location_source: LocationSource | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._records = records
        self._location_source = location_source
        self._deliveries: set[asyncio.Task[None]] = set()
        self._lock = asyncio.Lock()

    @property
    def pending_deliveries(self) -> int:
        return len(self._deliveries)

    async def last_fix(self) -> LocationFix | None:
        return await self._records.load_last_fix()

    async def on_fix(self, fix: LocationFix) -> None:
        """Handle one fix from the background delivery callback."""
        identity = await self._records.load_identity()
        if identity is None:
            _logger.error("Dropping fix captured at %s: device is not enrolled", fix.captured_at_ms)
            return

        self._schedule_delivery(identity, fix)

        async with self._lock:
            latest = await self._records.load_last_fix()
            if latest is not None and fix.captured_at_ms < latest.captured_at_ms:
                _logger.warning(
                    "Out-of-order fix captured at %s (last written %s), not recording it",
                    fix.captured_at_ms,
                    latest.captured_at_ms,
                )
                return

            await self._records.save_last_fix(fix)
        _logger.debug("Recorded last known fix captured at %s", fix.captured_at_ms)

    async def on_fixes(self, fixes: Iterable[LocationFix]) -> None:
        """Handle a batch of fixes, oldest first."""
        for fix in sorted(fixes, key=lambda f: f.captured_at_ms):
            await self.on_fix(fix)

    async def query_current_fix(self) -> LocationFix:
        """Poll the location source once and record the result like a delivered fix."""
        if self._location_source is None:
            raise TrackerError("No location source configured")
        fix = await self._location_source.get_current_fix()
        _logger.debug("Queried fix lat=%s long=%s ts=%s", fix.latitude, fix.longitude, fix.captured_at_ms)
        await self.on_fix(fix)
        return fix

    async def reset(self) -> None:
        """Clear the last known fix."""
        async with self._lock:
            await self._records.delete_last_fix()

    async def drain(self) -> None:
        """Wait for every in-flight delivery to settle."""
        while self._deliveries:
            await asyncio.gather(*list(self._deliveries), return_exceptions=True)

    def _schedule_delivery(self, identity: DeviceIdentity, fix: LocationFix) -> None:
        task = asyncio.create_task(self._deliver(identity, fix))
        self._deliveries.add(task)
        task.add_done_callback(self._deliveries.discard)

    async def _deliver(self, identity: DeviceIdentity, fix: LocationFix) -> None:
        try:
            await post_location(self._config, self._transport, identity, fix)
        except DeliveryError:
            _logger.warning("Location delivery failed", exc_info=True)
            return
        _logger.debug("Delivered fix captured at %s", fix.captured_at_ms)
