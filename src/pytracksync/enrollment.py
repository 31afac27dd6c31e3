"""Device enrollment.

Obtains the stable device identity from the remote registry exactly once
per installation and keeps it in the durable store.
"""

from __future__ import annotations

import asyncio
import logging
import secrets

from pytracksync._api.registry import register_device
from pytracksync._constants import MIN_SECRET_LENGTH, SECRET_ALPHABET
from pytracksync._transport import Transport
from pytracksync.config import TrackerConfig
from pytracksync.models import DeviceIdentity
from pytracksync.store import RecordStore

_logger = logging.getLogger(__name__)


def generate_secret(length: int = MIN_SECRET_LENGTH, alphabet: str = SECRET_ALPHABET) -> str:
    """Return a uniformly random alphanumeric secret from a CSPRNG."""
    if length < MIN_SECRET_LENGTH:
        raise ValueError(f"secret length must be at least {MIN_SECRET_LENGTH}, got {length}")
    return "".join(secrets.choice(alphabet) for _ in range(length))


class EnrollmentManager:
    """Owns the ``device`` record.

    Concurrent :meth:`ensure_enrolled` calls share one registration, so a
    process never issues more than one registry POST.
    """

    def __init__(self, config: TrackerConfig, transport: Transport, records: RecordStore) -> None:
        self._config = config
        self._transport = transport
        self._records = records
        self._lock = asyncio.Lock()

    async def identity(self) -> DeviceIdentity | None:
        """The persisted identity, or ``None`` before enrollment."""
        return await self._records.load_identity()

    async def ensure_enrolled(self) -> DeviceIdentity:
        """Return the device identity, registering with the registry if needed.

        Raises
        ------
        RegistrationError
            If the registry is unreachable or rejects the request.  Nothing
            is persisted in that case; the call can be retried.
        PersistenceError
            If the identity returned by the registry cannot be stored.
        """
        existing = await self._records.load_identity()
        if existing is not None:
            return existing

        async with self._lock:
            existing = await self._records.load_identity()
            if existing is not None:
                return existing

            secret = generate_secret(self._config.secret_length)
            identity = await register_device(self._config, self._transport, secret)
            await self._records.save_identity(identity)
            _logger.info("Device enrolled id=%s", identity.id)
            return identity

    async def forget(self) -> None:
        """Drop the persisted identity. Only a factory reset does this."""
        async with self._lock:
            await self._records.delete_identity()
        _logger.info("Device identity removed")
