"""Internal constants shared across the library."""

BASE_URL = "http://localhost:8080"
USER_AGENT = "pytracksync/1"

REGISTRY_ENDPOINT = "/device"
COLLECTOR_ENDPOINT = "/location"

# ------------------------------------------------------------------
# Durable store keys
# ------------------------------------------------------------------

DEVICE_KEY = "device"
SESSION_KEY = "trackingStart"
LOCATION_KEY = "location"

# ------------------------------------------------------------------
# Enrollment secret policy
# ------------------------------------------------------------------

SECRET_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
MIN_SECRET_LENGTH = 6

#: Background delivery hint in seconds (6 hours). Platforms treat it as best-effort.
DEFAULT_BACKGROUND_INTERVAL: float = 6 * 3600
DEFAULT_REFRESH_INTERVAL: float = 1.0
DEFAULT_REQUEST_TIMEOUT: float = 15.0
