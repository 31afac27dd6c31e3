"""Location collector endpoint.

Endpoint:
  - POST /location  {"deviceID", "secret", "latitude", "longitude", "timestamp"}
"""

from __future__ import annotations

from typing import Any

from pytracksync._transport import Transport
from pytracksync.config import TrackerConfig
from pytracksync.exceptions import DeliveryError, TrackerTransportError
from pytracksync.models.fix import LocationFix
from pytracksync.models.identity import DeviceIdentity


def build_location_payload(identity: DeviceIdentity, fix: LocationFix) -> dict[str, Any]:
    """Build the delivery record for one fix."""
    return {
        "deviceID": identity.id,
        "secret": identity.secret,
        "latitude": fix.latitude,
        "longitude": fix.longitude,
        "timestamp": fix.captured_at_ms,
    }


async def post_location(
    config: TrackerConfig,
    transport: Transport,
    identity: DeviceIdentity,
    fix: LocationFix,
) -> None:
    """Deliver a single fix to the collector.

    Raises
    ------
    DeliveryError
        If the collector is unreachable or answers with a non-2xx status.
    """
    try:
        await transport.post_json(config.collector_endpoint, build_location_payload(identity, fix))
    except TrackerTransportError as exc:
        raise DeliveryError(
            f"Delivery of fix captured at {fix.captured_at_ms} failed: {exc}",
            status_code=exc.status_code,
        ) from exc
