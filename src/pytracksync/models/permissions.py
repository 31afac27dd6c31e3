"""Location permission models."""

from __future__ import annotations

import enum

from pytracksync.models._base import TrackerBaseModel


class PermissionStatus(enum.StrEnum):
    """Tri-state answer of a location capability query."""

    GRANTED = "granted"
    DENIED = "denied"
    UNDETERMINED = "undetermined"


class PermissionState(TrackerBaseModel):
    """Foreground and background location permission, queried separately."""

    foreground: PermissionStatus = PermissionStatus.UNDETERMINED
    background: PermissionStatus = PermissionStatus.UNDETERMINED

    @property
    def granted(self) -> bool:
        """Whether both foreground and background access are granted."""
        return self.foreground is PermissionStatus.GRANTED and self.background is PermissionStatus.GRANTED
