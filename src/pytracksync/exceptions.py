"""Custom exception hierarchy for pytracksync."""

from __future__ import annotations


class TrackerError(Exception):
    """Base exception for all pytracksync errors."""


class TrackerConfigError(TrackerError):
    """Invalid or missing configuration."""


class PersistenceError(TrackerError):
    """Durable store read or write failure."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class TrackerTransportError(TrackerError):
    """HTTP-level failure (network, timeout, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class RegistrationError(TrackerError):
    """Registry unreachable or registration rejected.

    No identity is committed locally when this is raised, so
    ``ensure_enrolled()`` can simply be retried later.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class DeliveryError(TrackerError):
    """Collector unreachable or a location sample was rejected.

    Only ever logged by the uplink; it never rolls back the local
    last-known-fix update.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class PermissionDeniedError(TrackerError):
    """Location capability not granted (foreground or background)."""


class NotEnrolledError(TrackerError):
    """Operation requires a device identity that has not been obtained yet."""
