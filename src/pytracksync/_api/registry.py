"""Device registration endpoint.

Endpoint:
  - POST /device  {"secret": ...} -> {"deviceID": ...}
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pytracksync._redact import redact_for_log
from pytracksync._transport import Transport
from pytracksync.config import TrackerConfig
from pytracksync.exceptions import RegistrationError, TrackerTransportError
from pytracksync.models.identity import DeviceIdentity

_logger = logging.getLogger(__name__)


def build_register_request(secret: str) -> dict[str, str]:
    """Build the registration body for a locally generated *secret*."""
    return {"secret": secret}


def parse_register_response(response: dict[str, Any], secret: str) -> DeviceIdentity:
    """Combine the registry reply with the submitted secret.

    Raises
    ------
    RegistrationError
        If the reply carries no usable ``deviceID``.
    """
    try:
        return DeviceIdentity.model_validate({"deviceID": response.get("deviceID"), "secret": secret})
    except ValidationError as exc:
        raise RegistrationError(f"Registry response missing deviceID: {redact_for_log(response)}") from exc


async def register_device(config: TrackerConfig, transport: Transport, secret: str) -> DeviceIdentity:
    """Register this device with the remote registry.

    Parameters
    ----------
    config : TrackerConfig
        Client configuration.
    transport : Transport
        HTTP transport.
    secret : str
        Secret to submit; it is returned as part of the identity.

    Returns
    -------
    DeviceIdentity
        The identity assigned by the registry.

    Raises
    ------
    RegistrationError
        If the registry is unreachable or rejects the request.
    """
    endpoint = config.registry_endpoint
    try:
        response = await transport.post_json(endpoint, build_register_request(secret))
    except TrackerTransportError as exc:
        _logger.debug("Registration request failed", exc_info=True)
        raise RegistrationError(f"Registration failed: {exc}", status_code=exc.status_code) from exc

    identity = parse_register_response(response, secret)
    _logger.debug("Registered device id=%s", identity.id)
    return identity
