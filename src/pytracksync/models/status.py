"""Tracking status model."""

from __future__ import annotations

from pytracksync.models._base import TrackerBaseModel


class TrackingStatus(TrackerBaseModel):
    """Human-facing quantities derived from the persisted state.

    Parameters
    ----------
    active : bool
        Whether tracking is on.
    elapsed_since_start : float or None
        Seconds since tracking was turned on; ``None`` while off.
    elapsed_since_last_ping : float or None
        Seconds since the last recorded fix; ``None`` when none exists.
    latitude, longitude : float or None
        Coordinates of the last recorded fix.
    """

    active: bool = False
    elapsed_since_start: float | None = None
    elapsed_since_last_ping: float | None = None
    latitude: float | None = None
    longitude: float | None = None
