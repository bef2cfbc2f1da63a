"""Wire-level pieces of the camera control API: payload models and errors."""

from .errors import (
    AuthenticationFailed,
    CryptoError,
    DeviceError,
    ErrorCode,
    ErrorKind,
    InvalidCiphertextLength,
    InvalidKeyMaterial,
    InvalidPadding,
    Phase,
    SerializationError,
    SessionExpired,
    TapoError,
    TransportError,
    error_for_code,
    error_message,
)
from .models import LoginResult, Payload, Session

__all__ = [
    'AuthenticationFailed',
    'CryptoError',
    'DeviceError',
    'ErrorCode',
    'ErrorKind',
    'InvalidCiphertextLength',
    'InvalidKeyMaterial',
    'InvalidPadding',
    'Phase',
    'SerializationError',
    'SessionExpired',
    'TapoError',
    'TransportError',
    'error_for_code',
    'error_message',
    'LoginResult',
    'Payload',
    'Session',
]
