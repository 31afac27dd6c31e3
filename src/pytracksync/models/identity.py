"""Device identity model."""

from __future__ import annotations

from pydantic import Field, field_validator

from pytracksync.models._base import TrackerBaseModel


class DeviceIdentity(TrackerBaseModel):
    """Stable device identity obtained through enrollment.

    Parameters
    ----------
    id : str
        Device ID assigned by the registry.
    secret : str
        Locally generated secret submitted at registration.
    """

    id: str = Field(alias="deviceID")
    secret: str = Field(repr=False)

    @field_validator("id", "secret", mode="before")
    @classmethod
    def _coerce_non_empty(cls, value: object) -> str:
        text = "" if value is None else str(value).strip()
        if not text:
            raise ValueError("must be non-empty")
        return text
