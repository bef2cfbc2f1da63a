# tapo_cam/protocol/models.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from tapo_cam import config
from tapo_cam.protocol.constants import (
    METHOD_LOGIN,
    METHOD_MULTIPLE_REQUEST,
    METHOD_SECURE_PASSTHROUGH,
)
from tapo_cam.protocol.errors import SerializationError

Payload = Dict[str, Any]


@dataclass
class Session:
    """State of one camera connection, owned by a single caller.

    host/username/password never change. Everything else is written by the
    login handshake, except ``sequence_counter`` (advanced per secure send)
    and the token clear on expiry. Not synchronized: callers must not share
    one Session between threads without their own lock.
    """

    host: str
    username: str
    password: str = field(repr=False)

    session_token: str = ""
    sequence_counter: int = 0
    client_nonce: str = ""
    server_nonce: str = ""
    hashed_password: str = field(default="", repr=False)
    cipher_key: Optional[bytes] = field(default=None, repr=False)
    cipher_iv: Optional[bytes] = field(default=None, repr=False)
    # None until mode detection has run for this session
    secure_mode: Optional[bool] = None

    @property
    def base_url(self) -> str:
        return f"https://{self.host}:{config.CAM_PORT}"

    @property
    def request_url(self) -> str:
        return f"{self.base_url}/stok={self.session_token}/ds"

    @property
    def is_authenticated(self) -> bool:
        return self.session_token != ""

    def expire_token(self) -> None:
        self.session_token = ""

    def clear_credentials(self) -> None:
        """Drop everything a handshake attempt produced. Mode stays fixed."""
        self.session_token = ""
        self.sequence_counter = 0
        self.client_nonce = ""
        self.server_nonce = ""
        self.hashed_password = ""
        self.cipher_key = None
        self.cipher_iv = None


@dataclass
class LoginResult:
    """Parsed response to any of the ``login`` calls."""

    error_code: int = 0
    stok: str = ""
    start_seq: int = 0
    user_group: str = ""
    encrypt_types: List[str] = field(default_factory=list)
    nonce: str = ""
    device_confirm: str = ""

    @classmethod
    def from_response(cls, response: Payload) -> "LoginResult":
        """Parse a login reply, raising SerializationError on a malformed shape."""
        result = _object_field(response, "result")
        data = _object_field(result, "data")
        encrypt_types = data.get("encrypt_type") or []
        if not isinstance(encrypt_types, list) or not all(isinstance(t, str) for t in encrypt_types):
            raise SerializationError("login response field 'encrypt_type' must be a list of strings")
        try:
            error_code = int(response.get("error_code", 0))
            start_seq = int(result.get("start_seq", 0))
        except (TypeError, ValueError) as e:
            raise SerializationError(f"unexpected login response shape: {e}") from e
        return cls(
            error_code=error_code,
            stok=_str_field(result, "stok"),
            start_seq=start_seq,
            user_group=_str_field(result, "user_group"),
            encrypt_types=list(encrypt_types),
            nonce=_str_field(data, "nonce"),
            device_confirm=_str_field(data, "device_confirm"),
        )


def _object_field(container: Payload, name: str) -> Payload:
    value = container.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise SerializationError(f"login response field '{name}' must be an object")
    return value


def _str_field(container: Payload, name: str) -> str:
    value = container.get(name, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise SerializationError(f"login response field '{name}' must be a string")
    return value


def login_request(username: str, cnonce: str = "", encrypt_type: str = "",
                  digest_passwd: str = "", hashed: bool = False,
                  password: str = "") -> Payload:
    """Build a ``login`` request; empty optional fields are left out."""
    params: Payload = {}
    if cnonce:
        params["cnonce"] = cnonce
    if encrypt_type:
        params["encrypt_type"] = encrypt_type
    params["username"] = username
    if digest_passwd:
        params["digest_passwd"] = digest_passwd
    if hashed:
        params["hashed"] = True
    if password:
        params["password"] = password
    return {"method": METHOD_LOGIN, "params": params}


def multiple_request(method: str, params: Optional[Payload] = None) -> Payload:
    """Wrap a single method call in the batch envelope the camera expects."""
    request: Payload = {"method": method}
    if params is not None:
        request["params"] = params
    return {"method": METHOD_MULTIPLE_REQUEST, "params": {"requests": [request]}}


def secure_passthrough(encoded_request: str) -> Payload:
    return {"method": METHOD_SECURE_PASSTHROUGH, "params": {"request": encoded_request}}
