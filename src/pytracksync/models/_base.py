"""Base model for persisted and wire records.

Every pytracksync record inherits from :class:`TrackerBaseModel` which
provides:

* frozen instances, so a record read from the store cannot be mutated
  behind the owner's back.
* ``populate_by_name`` so records can be built from snake_case field
  names in code and from the persisted/wire key names (aliases).
* :meth:`TrackerBaseModel.to_record`, the dict written to the store.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class TrackerBaseModel(BaseModel):
    """Base for pytracksync records."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    def to_record(self) -> dict[str, Any]:
        """Serialize using the persisted key names."""
        return self.model_dump(by_alias=True, exclude_none=True)
