"""Client configuration for pytracksync."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pytracksync._constants import (
    BASE_URL,
    COLLECTOR_ENDPOINT,
    DEFAULT_BACKGROUND_INTERVAL,
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    MIN_SECRET_LENGTH,
    REGISTRY_ENDPOINT,
)
from pytracksync.exceptions import TrackerConfigError


@dataclasses.dataclass(frozen=True)
class TrackerConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Backend base URL hosting both the registry and the collector.
    registry_endpoint : str
        Path of the device registration endpoint.
    collector_endpoint : str
        Path of the location collector endpoint.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    secret_length : int
        Length of the locally generated enrollment secret (minimum 6).
    background_interval : float
        Interval hint in seconds passed to the location source when
        background delivery is started.  Defaults to 6 hours.
    refresh_interval : float
        Seconds between local status refreshes while tracking is on.
    store_path : str or None
        Path of the JSON file backing the durable store.  ``None`` keeps
        state in memory only.
    """

    base_url: str = BASE_URL
    registry_endpoint: str = REGISTRY_ENDPOINT
    collector_endpoint: str = COLLECTOR_ENDPOINT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    secret_length: int = MIN_SECRET_LENGTH
    background_interval: float = DEFAULT_BACKGROUND_INTERVAL
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    store_path: str | None = None

    def __post_init__(self) -> None:
        if self.secret_length < MIN_SECRET_LENGTH:
            raise TrackerConfigError(f"secret_length must be at least {MIN_SECRET_LENGTH}, got {self.secret_length}")
        if self.request_timeout <= 0:
            raise TrackerConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.refresh_interval <= 0:
            raise TrackerConfigError(f"refresh_interval must be positive, got {self.refresh_interval}")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls, **overrides: Any) -> TrackerConfig:
        """Create configuration from environment variables.

        Reads optional ``TRACKER_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        TrackerConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "TRACKER_BASE_URL": "base_url",
            "TRACKER_REGISTRY_ENDPOINT": "registry_endpoint",
            "TRACKER_COLLECTOR_ENDPOINT": "collector_endpoint",
            "TRACKER_STORE_PATH": "store_path",
        }
        _ENV_FLOAT_MAP = {
            "TRACKER_REQUEST_TIMEOUT": "request_timeout",
            "TRACKER_BACKGROUND_INTERVAL": "background_interval",
            "TRACKER_REFRESH_INTERVAL": "refresh_interval",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        try:
            for env_key, field_name in _ENV_FLOAT_MAP.items():
                val = env.get(env_key)
                if val is not None and field_name not in overrides:
                    config_kwargs[field_name] = float(val)

            length_env = env.get("TRACKER_SECRET_LENGTH")
            if length_env is not None and "secret_length" not in overrides:
                config_kwargs["secret_length"] = int(length_env)
        except ValueError as exc:
            raise TrackerConfigError(f"Invalid numeric TRACKER_* variable: {exc}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
