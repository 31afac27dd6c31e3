"""In-memory store backend."""

from __future__ import annotations

import copy
from typing import Any


class MemoryStore:
    """Process-local store. Nothing survives a restart unless the instance is shared."""

    def __init__(self, initial: dict[str, dict[str, Any]] | None = None) -> None:
        self._data: dict[str, dict[str, Any]] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str) -> dict[str, Any] | None:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    async def set(self, key: str, value: dict[str, Any]) -> None:
        self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> dict[str, dict[str, Any]]:
        return copy.deepcopy(self._data)
