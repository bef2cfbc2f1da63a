# tapo_cam/protocol/errors.py
"""Device status codes and the exception types raised by the client.

Every failure is raised as a ``TapoError`` subclass. ``kind`` tells which
family it belongs to (transport, serialization, device status, crypto) and
``phase`` tells which step of the handshake or dispatch produced it.
"""

from contextlib import contextmanager
from enum import Enum, IntEnum, auto
from typing import Optional


class ErrorCode(IntEnum):
    SUCCESS = 0
    INVALID_TOKEN = -40401
    RATE_LIMITED = -40404
    INVALID_AUTH = -40411
    LOGIN_REQUIRED = -40413
    CRUISE_IN_PROGRESS = -64303
    GENERAL = -1


ERROR_MESSAGES = {
    ErrorCode.SUCCESS: "Success",
    ErrorCode.INVALID_TOKEN: "Invalid or expired token",
    ErrorCode.RATE_LIMITED: "Rate limited - temporary suspension",
    ErrorCode.INVALID_AUTH: "Invalid authentication data",
    ErrorCode.LOGIN_REQUIRED: "Login required",
    ErrorCode.CRUISE_IN_PROGRESS: "Cruise in progress - stop cruise first",
    ErrorCode.GENERAL: "General error",
}

UNKNOWN_ERROR_MESSAGE = "Unknown error"


def error_message(code: int) -> str:
    """Human-readable message for a device status code."""
    return ERROR_MESSAGES.get(code, UNKNOWN_ERROR_MESSAGE)


class ErrorKind(Enum):
    TRANSPORT = auto()
    SERIALIZATION = auto()
    DEVICE = auto()
    CRYPTO = auto()


class Phase(Enum):
    DETECTION = "detection"
    LEGACY_LOGIN = "legacy login"
    SECURE_PHASE1 = "phase 1"
    SECURE_PHASE2 = "phase 2"
    SECURE_PHASE3 = "phase 3"
    DISPATCH = "dispatch"
    DECRYPT = "decrypt"


class TapoError(Exception):
    """Base class for every error raised by the client."""

    kind: ErrorKind = ErrorKind.DEVICE

    def __init__(self, message: str, phase: Optional[Phase] = None):
        super().__init__(message)
        self.message = message
        self.phase = phase

    def __str__(self):
        if self.phase is None:
            return self.message
        return f"{self.phase.value}: {self.message}"


class TransportError(TapoError):
    """Connection refused, timeout or TLS failure."""

    kind = ErrorKind.TRANSPORT


class SerializationError(TapoError):
    """Malformed JSON or base64 on the way in or out."""

    kind = ErrorKind.SERIALIZATION


class DeviceError(TapoError):
    """Non-zero status reported by the camera."""

    kind = ErrorKind.DEVICE

    def __init__(self, code: int, message: Optional[str] = None, phase: Optional[Phase] = None):
        super().__init__(message or error_message(code), phase)
        self.code = code

    @property
    def error_code(self) -> Optional[ErrorCode]:
        """The known ``ErrorCode`` member, or None for codes outside the table."""
        try:
            return ErrorCode(self.code)
        except ValueError:
            return None


class SessionExpired(DeviceError):
    """The camera rejected the session token; the local token was cleared."""

    def __init__(self, message: str = "session expired - please re-authenticate",
                 phase: Optional[Phase] = None):
        super().__init__(ErrorCode.INVALID_TOKEN, message, phase)


class AuthenticationFailed(DeviceError):
    """Neither password hash matched the device confirmation."""

    def __init__(self, message: str = "device validation failed - check password",
                 phase: Optional[Phase] = None):
        super().__init__(ErrorCode.INVALID_AUTH, message, phase)


class CryptoError(TapoError):
    kind = ErrorKind.CRYPTO


class InvalidKeyMaterial(CryptoError):
    pass


class InvalidCiphertextLength(CryptoError):
    pass


class InvalidPadding(CryptoError):
    pass


def error_for_code(code: int, message: Optional[str] = None,
                   phase: Optional[Phase] = None) -> DeviceError:
    """Build the DeviceError matching a non-zero device status."""
    if code == ErrorCode.INVALID_TOKEN:
        return SessionExpired(message or error_message(code), phase)
    return DeviceError(code, message, phase)


@contextmanager
def in_phase(phase: Phase):
    """Stamp ``phase`` on any TapoError escaping the block that has none yet."""
    try:
        yield
    except TapoError as e:
        if e.phase is None:
            e.phase = phase
        raise
