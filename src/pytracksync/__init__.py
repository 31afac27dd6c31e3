"""pytracksync - Async Python core for device location tracking and uplink."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pytracksync")
except PackageNotFoundError:
    __version__ = "0+local"
from pytracksync.client import TrackerClient
from pytracksync.config import TrackerConfig
from pytracksync.enrollment import EnrollmentManager, generate_secret
from pytracksync.exceptions import (
    DeliveryError,
    NotEnrolledError,
    PermissionDeniedError,
    PersistenceError,
    RegistrationError,
    TrackerConfigError,
    TrackerError,
    TrackerTransportError,
)
from pytracksync.location import LocationSource, request_permissions
from pytracksync.models import (
    DeviceIdentity,
    LocationFix,
    PermissionState,
    PermissionStatus,
    TrackingSession,
    TrackingState,
    TrackingStatus,
)
from pytracksync.status import project
from pytracksync.store import JsonFileStore, KeyValueStore, MemoryStore, RecordStore
from pytracksync.tracking import TrackingStateMachine
from pytracksync.uplink import SampleUplink

__all__ = [
    "__version__",
    "DeliveryError",
    "DeviceIdentity",
    "EnrollmentManager",
    "JsonFileStore",
    "KeyValueStore",
    "LocationFix",
    "LocationSource",
    "MemoryStore",
    "NotEnrolledError",
    "PermissionDeniedError",
    "PermissionState",
    "PermissionStatus",
    "PersistenceError",
    "RecordStore",
    "RegistrationError",
    "SampleUplink",
    "TrackerClient",
    "TrackerConfig",
    "TrackerConfigError",
    "TrackerError",
    "TrackerTransportError",
    "TrackingSession",
    "TrackingState",
    "TrackingStateMachine",
    "TrackingStatus",
    "generate_secret",
    "project",
]
