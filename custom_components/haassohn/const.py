"""Constants for Haas+Sohn pellet stove integration."""

from __future__ import annotations

DOMAIN = "haassohn"
DEFAULT_SCAN_INTERVAL = 30  # seconds

# HTTP protocol
STATUS_PATH = "/status.cgi"
REQUEST_TIMEOUT = 5.0  # seconds, applies to GET and POST

# The nonce is re-fetched before a write once it is older than this
NONCE_EXPIRY = 60 * 60  # 1 hour

# Headers mimicking the vendor's mobile app
BACKEND_URL = "https://app.haassohn.com"
APP_TOKEN = "32bytes"
APP_USER_AGENT = "ios"

# Persistence of the state point store
STORAGE_VERSION = 1
STORAGE_SAVE_DELAY = 10  # seconds

# Well-known state point ids
POINT_NONCE = "device.meta.nonce"
POINT_HW_VERSION = "device.meta.hw_version"
POINT_SW_VERSION = "device.meta.sw_version"
POINT_ECO_EDITABLE = "device.meta.eco_editable"
POINT_PROGRAM = "device.prg"
POINT_TARGET_TEMP = "device.sp_temp"
POINT_ECO_MODE = "device.eco_mode"
POINT_CONNECTION = "info.connection"
POINT_MISSING_STATE = "info.missing_state"
POINT_TERMINATED = "info.terminated"

# Writable points and the POST field each one maps to
COMMAND_FIELDS = {
    POINT_PROGRAM: "prg",
    POINT_TARGET_TEMP: "sp_temp",
    POINT_ECO_MODE: "eco_mode",
}

# Hardware/software combinations known to work, keyed "<hw>_<sw>".
# Extend through the options flow when a new firmware shows up.
DEFAULT_SUPPORTED_VERSIONS: dict[str, bool] = {
    "3.0_1.4.1": True,
    "3.0_1.5.5": True,
    "5.0_1.3.6": True,
    "5.0_1.4.1": True,
    "6.0_1.4.1": True,
}

# Configuration keys
CONF_PIN = "pin"
CONF_SCAN_INTERVAL = "scan_interval"
CONF_SUPPORTED_VERSIONS = "supported_versions"
