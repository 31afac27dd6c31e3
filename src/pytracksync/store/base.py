"""Key-value store interface."""

from __future__ import annotations

from typing import Any, Protocol


class KeyValueStore(Protocol):
    """Structural interface of a durable key-value backend.

    Implementations must give read-your-writes consistency per key and
    raise :class:`~pytracksync.exceptions.PersistenceError` on I/O failure.
    """

    async def get(self, key: str) -> dict[str, Any] | None:
        """Return the stored record, or ``None`` when the key is not found."""
        ...

    async def set(self, key: str, value: dict[str, Any]) -> None:
        ...

    async def delete(self, key: str) -> None:
        """Remove *key*. Deleting a missing key is not an error."""
        ...
