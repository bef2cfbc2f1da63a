"""Hash primitives and nonce generation used by the login handshake.

All hex digests are returned in uppercase, which is what the camera
firmware compares against.
"""

import hashlib
import logging
import secrets

from tapo_cam import config

logger = logging.getLogger(__name__)


def md5_hex(data: str) -> str:
    """Uppercase MD5 hex digest of a UTF-8 string (32 chars)."""
    return hashlib.md5(data.encode("utf-8")).hexdigest().upper()


def sha256_hex(data: str) -> str:
    """Uppercase SHA256 hex digest of a UTF-8 string (64 chars)."""
    return hashlib.sha256(data.encode("utf-8")).hexdigest().upper()


def sha256_bytes(data: str) -> bytes:
    """Raw 32-byte SHA256 digest, used for key slicing."""
    return hashlib.sha256(data.encode("utf-8")).digest()


def generate_nonce() -> str:
    """Return a client nonce: 4 random bytes as 8 uppercase hex chars.

    If the entropy source fails the fixed ``config.FALLBACK_NONCE`` is
    returned instead of raising.
    """
    try:
        raw = secrets.token_bytes(4)
    except (OSError, NotImplementedError) as e:
        logger.warning(f"[NONCE] Entropy source failed ({e}), using fallback nonce")
        return config.FALLBACK_NONCE
    return raw.hex().upper()
