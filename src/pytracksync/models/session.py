"""Tracking session model."""

from __future__ import annotations

import enum

from pydantic import Field, model_validator

from pytracksync.models._base import TrackerBaseModel


class TrackingState(enum.StrEnum):
    """The two states of the tracking state machine."""

    OFF = "off"
    ON = "on"


class TrackingSession(TrackerBaseModel):
    """Persisted tracking session.

    ``active=False`` implies ``started_at_ms is None``; an active session
    always carries its start time.
    """

    active: bool = False
    started_at_ms: int | None = Field(default=None, alias="trackingStart")

    @model_validator(mode="after")
    def _check_consistency(self) -> TrackingSession:
        if self.active and self.started_at_ms is None:
            raise ValueError("active session requires trackingStart")
        if not self.active and self.started_at_ms is not None:
            raise ValueError("inactive session must not carry trackingStart")
        return self

    @classmethod
    def started(cls, now_ms: int) -> TrackingSession:
        return cls(active=True, started_at_ms=now_ms)

    @property
    def state(self) -> TrackingState:
        return TrackingState.ON if self.active else TrackingState.OFF


#: The session every device starts in, and the one recovered when nothing is persisted.
INACTIVE_SESSION = TrackingSession()
