"""HTTP transport for the registry and collector endpoints."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pytracksync._constants import USER_AGENT
from pytracksync._redact import redact_for_log
from pytracksync.config import TrackerConfig
from pytracksync.exceptions import TrackerTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`JsonTransport`) concrete.
    """

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        ...


class JsonTransport:
    """HTTP transport posting JSON bodies with a bounded total timeout."""

    def __init__(self, config: TrackerConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        """POST *payload* as JSON and return the decoded JSON object reply.

        An empty 2xx body decodes to ``{}``.

        Raises
        ------
        TrackerTransportError
            On network failure, timeout, a non-2xx status, or a body that is
            not a JSON object.
        """
        url = f"{self._config.base_url}{endpoint}"
        headers: dict[str, str] = {
            "accept": "application/json",
            "content-type": "application/json; charset=UTF-8",
            "user-agent": USER_AGENT,
        }
        body = json.dumps(dict(payload), separators=(",", ":"))

        _logger.debug("POST %s payload=%s", url, redact_for_log(payload))

        try:
            async with self._http.post(url, data=body, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise TrackerTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except TrackerTransportError:
            raise
        except TimeoutError as exc:
            raise TrackerTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise TrackerTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        if not text.strip():
            return {}

        try:
            result = json.loads(text)
        except json.JSONDecodeError as exc:
            raise TrackerTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                status_code=resp.status,
                endpoint=endpoint,
            ) from exc

        if not isinstance(result, dict):
            raise TrackerTransportError(
                f"Expected a JSON object from {endpoint}, got {type(result).__name__}",
                status_code=resp.status,
                endpoint=endpoint,
            )

        _logger.debug("HTTP %s from %s body=%s", resp.status, endpoint, redact_for_log(result))
        return result
