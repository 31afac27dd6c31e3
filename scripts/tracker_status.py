#!/usr/bin/env python3
"""Inspect or clear the persisted tracking state of a device.

Reads the JSON store file written by :class:`pytracksync.JsonFileStore`
and prints the projected tracking status, the way the companion app's
status screen would show it.

Usage
-----
::

    python scripts/tracker_status.py --store ~/.tracker/state.json
    python scripts/tracker_status.py --store state.json --json
    python scripts/tracker_status.py --store state.json --clear

``--clear`` removes the records behind the app's back; run it only while
the app and its background delivery are stopped.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pytracksync import JsonFileStore, PersistenceError, RecordStore, project  # noqa: E402
from pytracksync.status import now_ms  # noqa: E402


def _format_seconds(value: float | None) -> str:
    if value is None:
        return "n/a"
    seconds = int(value)
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)
    parts = [f"{n} {unit}" for n, unit in ((days, "days"), (hours, "hours"), (minutes, "minutes")) if n > 0]
    parts.append(f"{seconds} seconds")
    return ", ".join(parts) + " ago"


async def main() -> int:
    parser = argparse.ArgumentParser(description="Show the persisted tracking status of a device.")
    parser.add_argument("--store", required=True, help="Path of the JSON store file")
    parser.add_argument("--json", action="store_true", help="Output as machine-readable JSON")
    parser.add_argument("--clear", action="store_true", help="Remove every persisted record")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    backend = JsonFileStore(args.store)
    records = RecordStore(backend)

    try:
        if args.clear:
            await records.delete_session()
            await records.delete_last_fix()
            await records.delete_identity()
            print("persistent storage cleared")
            return 0

        identity = await records.load_identity()
        session = await records.load_session()
        last_fix = await records.load_last_fix()
    except PersistenceError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    status = project(now_ms(), session, last_fix)

    if args.json:
        print(
            json.dumps(
                {
                    "deviceID": identity.id if identity else None,
                    "status": status.model_dump(),
                },
                indent=2,
            )
        )
        return 0

    print(f"DeviceID: {identity.id if identity else 'not enrolled'}")
    print(f"Status: {'Currently Tracking' if status.active else 'Currently Not Tracking'}")
    if status.active:
        print(f"Tracking since {_format_seconds(status.elapsed_since_start)}")
        print(f"Location pinged {_format_seconds(status.elapsed_since_last_ping)}")
        lat = "N/A" if status.latitude is None else status.latitude
        lon = "N/A" if status.longitude is None else status.longitude
        print(f"Last pinged location: lat: {lat}, long: {lon}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
