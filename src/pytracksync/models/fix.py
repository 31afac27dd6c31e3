"""Location fix model."""

from __future__ import annotations

from pydantic import Field

from pytracksync.models._base import TrackerBaseModel


class LocationFix(TrackerBaseModel):
    """A single position reading.

    Persisted as the last known fix using the ``latestLat`` /
    ``latestLong`` / ``locationTimestamp`` keys.

    Parameters
    ----------
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    captured_at_ms : int
        Capture time in milliseconds since the Unix epoch.
    """

    latitude: float = Field(alias="latestLat", ge=-90.0, le=90.0)
    longitude: float = Field(alias="latestLong", ge=-180.0, le=180.0)
    captured_at_ms: int = Field(alias="locationTimestamp", ge=0)
