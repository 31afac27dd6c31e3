"""Typed access to the three persisted records.

Maps the store keys to their models. Reads of optional records are
lenient: a missing or malformed record reads as absent. Writes are strict:
any backend failure surfaces as :class:`PersistenceError`.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import ValidationError

from pytracksync._constants import DEVICE_KEY, LOCATION_KEY, SESSION_KEY
from pytracksync.exceptions import PersistenceError
from pytracksync.models import INACTIVE_SESSION, DeviceIdentity, LocationFix, TrackingSession
from pytracksync.models._base import TrackerBaseModel
from pytracksync.store.base import KeyValueStore

_logger = logging.getLogger(__name__)

TModel = TypeVar("TModel", bound=TrackerBaseModel)


class RecordStore:
    """Model-level facade over a :class:`KeyValueStore` backend."""

    def __init__(self, backend: KeyValueStore) -> None:
        self._backend = backend

    @property
    def backend(self) -> KeyValueStore:
        return self._backend

    async def _read(self, key: str, model: type[TModel]) -> TModel | None:
        raw: Any = await self._backend.get(key)
        if raw is None:
            return None
        try:
            return model.model_validate(raw)
        except ValidationError:
            _logger.warning("Ignoring malformed %r record in store", key, exc_info=True)
            return None

    async def _write(self, key: str, record: TrackerBaseModel) -> None:
        try:
            await self._backend.set(key, record.to_record())
        except PersistenceError:
            raise
        except Exception as exc:
            raise PersistenceError(f"Failed to write {key!r}: {exc}", key=key) from exc

    async def _delete(self, key: str) -> None:
        try:
            await self._backend.delete(key)
        except PersistenceError:
            raise
        except Exception as exc:
            raise PersistenceError(f"Failed to delete {key!r}: {exc}", key=key) from exc

    # ------------------------------------------------------------------
    # device
    # ------------------------------------------------------------------

    async def load_identity(self) -> DeviceIdentity | None:
        return await self._read(DEVICE_KEY, DeviceIdentity)

    async def save_identity(self, identity: DeviceIdentity) -> None:
        await self._write(DEVICE_KEY, identity)

    async def delete_identity(self) -> None:
        await self._delete(DEVICE_KEY)

    # ------------------------------------------------------------------
    # trackingStart
    # ------------------------------------------------------------------

    async def load_session(self) -> TrackingSession:
        """Return the persisted session, or the inactive session when none exists."""
        raw: Any = await self._backend.get(SESSION_KEY)
        if raw is None:
            return INACTIVE_SESSION
        if isinstance(raw, dict) and "active" not in raw and raw.get("trackingStart") is not None:
            # Records written without the flag only ever exist for running sessions.
            raw = {**raw, "active": True}
        try:
            return TrackingSession.model_validate(raw)
        except ValidationError:
            _logger.warning("Ignoring malformed %r record in store", SESSION_KEY, exc_info=True)
            return INACTIVE_SESSION

    async def save_session(self, session: TrackingSession) -> None:
        if not session.active:
            await self._delete(SESSION_KEY)
            return
        await self._write(SESSION_KEY, session)

    async def delete_session(self) -> None:
        await self._delete(SESSION_KEY)

    # ------------------------------------------------------------------
    # location
    # ------------------------------------------------------------------

    async def load_last_fix(self) -> LocationFix | None:
        """Return the last known fix; an unreadable record counts as absent."""
        try:
            return await self._read(LOCATION_KEY, LocationFix)
        except PersistenceError:
            _logger.warning("Could not read %r record, treating as absent", LOCATION_KEY, exc_info=True)
            return None

    async def save_last_fix(self, fix: LocationFix) -> None:
        await self._write(LOCATION_KEY, fix)

    async def delete_last_fix(self) -> None:
        await self._delete(LOCATION_KEY)
