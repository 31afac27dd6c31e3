"""Location source interface and permission flow.

The platform service producing GPS fixes and background execution slots
is an external collaborator. This module only fixes the shape the core
expects from it.
"""

from __future__ import annotations

import logging
from typing import Protocol

from pytracksync.models import LocationFix, PermissionState, PermissionStatus

_logger = logging.getLogger(__name__)


class LocationSource(Protocol):
    """Structural interface of a platform location service."""

    async def get_current_fix(self) -> LocationFix:
        """One-shot position query. May take several seconds to resolve."""
        ...

    async def start_background_delivery(self, interval: float) -> None:
        """Begin periodic background delivery roughly every *interval* seconds."""
        ...

    async def stop_background_delivery(self) -> None:
        ...

    async def get_permissions(self) -> PermissionState:
        ...

    async def request_foreground_permission(self) -> PermissionStatus:
        ...

    async def request_background_permission(self) -> PermissionStatus:
        ...


async def request_permissions(source: LocationSource) -> PermissionState:
    """Ask for foreground, then background location access.

    Background access is never requested before foreground access has
    been granted.
    """
    current = await source.get_permissions()
    if current.granted:
        return current

    foreground = current.foreground
    if foreground is not PermissionStatus.GRANTED:
        foreground = await source.request_foreground_permission()
    if foreground is not PermissionStatus.GRANTED:
        _logger.info("Foreground location permission not granted: %s", foreground)
        return PermissionState(foreground=foreground, background=current.background)

    background = current.background
    if background is not PermissionStatus.GRANTED:
        background = await source.request_background_permission()
    if background is not PermissionStatus.GRANTED:
        _logger.info("Background location permission not granted: %s", background)
    return PermissionState(foreground=foreground, background=background)
