"""Record models for pytracksync."""

from pytracksync.models.fix import LocationFix
from pytracksync.models.identity import DeviceIdentity
from pytracksync.models.permissions import PermissionState, PermissionStatus
from pytracksync.models.session import INACTIVE_SESSION, TrackingSession, TrackingState
from pytracksync.models.status import TrackingStatus

__all__ = [
    "DeviceIdentity",
    "INACTIVE_SESSION",
    "LocationFix",
    "PermissionState",
    "PermissionStatus",
    "TrackingSession",
    "TrackingState",
    "TrackingStatus",
]
