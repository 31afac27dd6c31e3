"""Durable key-value store layer.

This package is the single path through which tracking state survives
process restarts. Components never touch a backend directly; they go
through :class:`RecordStore`, which owns the key names and record shapes.
"""

from pytracksync.store.base import KeyValueStore
from pytracksync.store.file import JsonFileStore
from pytracksync.store.memory import MemoryStore
from pytracksync.store.records import RecordStore

__all__ = ["JsonFileStore", "KeyValueStore", "MemoryStore", "RecordStore"]
