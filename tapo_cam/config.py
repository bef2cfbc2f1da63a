# Configuration for the Tapo camera control client

import os

# ==============================================================================
# HELPERS
# ==============================================================================


def _get_env(key, default):
    value = os.environ.get(key)
    return value if value else default


def _get_env_float(key, default):
    value = os.environ.get(key)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


# ==============================================================================
# CONSTANTS (Device protocol)
# ==============================================================================

# The camera only listens on HTTPS.
CAM_PORT = 443

# Encrypt type advertised by firmware that supports the secure handshake.
SECURE_ENCRYPT_TYPE = "3"

# Returned by the nonce generator if the OS entropy source is unavailable.
# Weak on purpose; logged as a warning whenever it is used.
FALLBACK_NONCE = "ABCD1234"

# Fixed client identification sent with every request.
USER_AGENT = "Tapo CameraClient Android"
REQUEST_BY_APP = "true"

# ==============================================================================
# User Configuration (environment overrides)
# ==============================================================================

# Default camera address and credentials for the CLI.
CAM_HOST = _get_env("TAPO_HOST", "")
DEFAULT_USERNAME = _get_env("TAPO_DEFAULT_USERNAME", "")
DEFAULT_PASSWORD = _get_env("TAPO_DEFAULT_PASSWORD", "")

# Blocking HTTP timeout per request, in seconds.
REQUEST_TIMEOUT = _get_env_float("TAPO_REQUEST_TIMEOUT", 10.0)

LOG_LEVEL = _get_env("LOG_LEVEL", "INFO").upper()
