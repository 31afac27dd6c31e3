"""Keep the device secret out of debug logs."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

SECRET_FIELD = "secret"


def redact_for_log(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of a registry or collector body with the secret masked.

    Bodies exchanged with the backend are flat JSON objects, so only
    top-level keys are inspected.
    """
    return {key: "<redacted>" if key == SECRET_FIELD else value for key, value in payload.items()}
