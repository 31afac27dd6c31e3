"""Status projection.

Derives the human-facing tracking quantities from persisted state. Pure:
no I/O, no clock reads, no side effects.
"""

from __future__ import annotations

import time

from pytracksync.models import LocationFix, TrackingSession, TrackingStatus


def now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


def _elapsed_seconds(now: int, since: int) -> float:
    # Clock skew may put *since* in the future.
    return max(0.0, (now - since) / 1000)


def project(now: int, session: TrackingSession, last_fix: LocationFix | None) -> TrackingStatus:
    """Project *session* and *last_fix* at epoch-millisecond time *now*.

    ``elapsed_since_start`` is ``None`` while tracking is off and
    ``elapsed_since_last_ping`` is ``None`` until a fix is recorded.
    Elapsed values are in seconds and never negative.
    """
    elapsed_since_start: float | None = None
    if session.active and session.started_at_ms is not None:
        elapsed_since_start = _elapsed_seconds(now, session.started_at_ms)

    if last_fix is None:
        return TrackingStatus(active=session.active, elapsed_since_start=elapsed_since_start)

    return TrackingStatus(
        active=session.active,
        elapsed_since_start=elapsed_since_start,
        elapsed_since_last_ping=_elapsed_seconds(now, last_fix.captured_at_ms),
        latitude=last_fix.latitude,
        longitude=last_fix.longitude,
    )
