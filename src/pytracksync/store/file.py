"""JSON file store backend."""

from __future__ import annotations

import asyncio
import contextlib
import copy
import json
import logging
import os
import tempfile
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

try:  # pragma: no cover - platform dependent
    import fcntl
except ImportError:  # pragma: no cover - Windows fallback
    fcntl = None  # type: ignore[assignment]
    import msvcrt  # type: ignore[import]

from pytracksync.exceptions import PersistenceError

_logger = logging.getLogger(__name__)

Document = dict[str, dict[str, Any]]


class JsonFileStore:
    """Durable store keeping every key in one JSON document.

    Each write rewrites the document into a temporary file next to it and
    atomically replaces the original, so a crash mid-write leaves either the
    old or the new document on disk.

    Nothing is cached between calls: every operation reads the document
    from disk.  Read-modify-write cycles hold an advisory lock on a
    ``<name>.lock`` sidecar file, so several store instances (the UI
    process and a background delivery process) can share one path without
    losing each other's keys.  Blocking file I/O runs in a worker thread.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._lock_path = self._path.with_name(self._path.name + ".lock")
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    @contextlib.contextmanager
    def _file_lock(self) -> Iterator[None]:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self._lock_path, os.O_RDWR | os.O_CREAT, 0o664)
        except OSError as exc:
            raise PersistenceError(f"Cannot open lock file {self._lock_path}: {exc}") from exc
        try:
            if fcntl:  # POSIX
                fcntl.flock(fd, fcntl.LOCK_EX)
            else:  # Windows
                msvcrt.locking(fd, msvcrt.LK_LOCK, 1)  # type: ignore[attr-defined]
            try:
                yield
            finally:
                if fcntl:
                    fcntl.flock(fd, fcntl.LOCK_UN)
                else:
                    msvcrt.locking(fd, msvcrt.LK_UNLCK, 1)  # type: ignore[attr-defined]
        finally:
            os.close(fd)

    def _read_document(self) -> Document:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise PersistenceError(f"Cannot read store file {self._path}: {exc}") from exc

        if not text.strip():
            return {}
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Store file {self._path} is not valid JSON: {exc}") from exc
        if not isinstance(document, dict):
            raise PersistenceError(f"Store file {self._path} does not hold a JSON object")
        return document

    def _write_document(self, document: Document) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(document, fh, separators=(",", ":"), sort_keys=True)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, self._path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Cannot write store file {self._path}: {exc}") from exc

    def _update_document(self, mutate: Callable[[Document], bool]) -> bool:
        """Apply *mutate* to the on-disk document under the file lock.

        *mutate* edits the document in place and returns whether it changed
        anything; unchanged documents are not rewritten.
        """
        with self._file_lock():
            document = self._read_document()
            if not mutate(document):
                return False
            self._write_document(document)
            return True

    async def get(self, key: str) -> dict[str, Any] | None:
        async with self._lock:
            document = await asyncio.to_thread(self._read_document)
        value = document.get(key)
        return copy.deepcopy(value) if value is not None else None

    async def set(self, key: str, value: dict[str, Any]) -> None:
        stored = copy.deepcopy(value)

        def _put(document: Document) -> bool:
            document[key] = stored
            return True

        async with self._lock:
            await asyncio.to_thread(self._update_document, _put)
        _logger.debug("Store %s: wrote key=%s", self._path, key)

    async def delete(self, key: str) -> None:
        def _pop(document: Document) -> bool:
            return document.pop(key, None) is not None

        async with self._lock:
            changed = await asyncio.to_thread(self._update_document, _pop)
        if changed:
            _logger.debug("Store %s: deleted key=%s", self._path, key)
