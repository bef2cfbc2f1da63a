import base64
import binascii
import logging
from typing import Any, Dict, Optional

from tapo_cam.crypto import aes_cipher, sha256_hex
from tapo_cam.http_transport import HttpTransport, dump_json, load_json
from tapo_cam.protocol.constants import HEADER_SEQ, HEADER_TAG
from tapo_cam.protocol.errors import (
    ErrorCode,
    Phase,
    SerializationError,
    SessionExpired,
    error_for_code,
    in_phase,
)
from tapo_cam.protocol.models import Payload, Session, multiple_request, secure_passthrough
from tapo_cam.session_protocol import SessionProtocol


def _status(response: Payload) -> int:
    try:
        return int(response.get("error_code", 0))
    except (TypeError, ValueError) as e:
        raise SerializationError(f"invalid error_code in response: {e}") from e


def _result(response: Payload, what: str = "response") -> Dict[str, Any]:
    result = response.get("result")
    if result is None:
        return {}
    if not isinstance(result, dict):
        raise SerializationError(f"{what} result must be a JSON object")
    return result


class SecureChannel:
    """
    Sends application commands over an authenticated session.

    Plain mode posts the JSON payload as is. Secure mode encrypts it into a
    securePassthrough envelope, tags it with the sequence number and bumps
    the counter once per send.

    An invalid-token status clears the local token and raises SessionExpired.
    The failed command is not retried; the next call logs in again.
    """

    def __init__(self, session: Session, transport: HttpTransport,
                 protocol: Optional[SessionProtocol] = None, logger=None):
        self.session = session
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)
        self.protocol = protocol or SessionProtocol(session, transport, logger=self.logger)

    def execute(self, method: str, params: Optional[Payload] = None) -> Dict[str, Any]:
        """Send one method call wrapped in a multipleRequest batch."""
        return self.execute_direct(multiple_request(method, params))

    def execute_direct(self, payload: Payload) -> Dict[str, Any]:
        """Send an already-shaped payload unchanged."""
        if not self.session.is_authenticated:
            self.logger.info("[CHANNEL] No session token, logging in first")
            self.protocol.authenticate()

        with in_phase(Phase.DISPATCH):
            if self.session.secure_mode:
                return self._send_secure(payload)
            return self._send_plain(payload)

    def _send_plain(self, payload: Payload) -> Dict[str, Any]:
        body = self.transport.post(self.session.request_url, dump_json(payload))
        response = load_json(body)
        self._check_status(response)
        return _result(response)

    def _send_secure(self, payload: Payload) -> Dict[str, Any]:
        request_json = dump_json(payload)
        encrypted = aes_cipher.encrypt(
            request_json.encode("utf-8"), self.session.cipher_key, self.session.cipher_iv
        )
        envelope_json = dump_json(
            secure_passthrough(base64.b64encode(encrypted).decode("ascii"))
        )

        seq = self.session.sequence_counter
        headers = {
            HEADER_SEQ: str(seq),
            HEADER_TAG: self.calculate_tag(envelope_json, seq),
        }
        # Counted per attempt, even if the POST below fails
        self.session.sequence_counter += 1
        self.logger.debug(f"[CHANNEL] Secure request seq={seq}")

        body = self.transport.post(self.session.request_url, envelope_json, headers)
        response = load_json(body)
        self._check_status(response)

        with in_phase(Phase.DECRYPT):
            inner = self._open_envelope(response)
        code = _status(inner)
        if code != 0:
            raise error_for_code(code)
        return _result(inner, "decrypted response")

    def _open_envelope(self, response: Payload) -> Payload:
        encoded = _result(response).get("response")
        if not isinstance(encoded, str):
            raise SerializationError("secure response carried no encrypted payload")
        try:
            ciphertext = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise SerializationError(f"failed to decode response: {e}") from e

        plaintext = aes_cipher.decrypt(ciphertext, self.session.cipher_key, self.session.cipher_iv)
        return load_json(plaintext, "decrypted response")

    def _check_status(self, response: Payload) -> None:
        code = _status(response)
        if code == 0:
            return
        if code == ErrorCode.INVALID_TOKEN:
            self.logger.warning("[CHANNEL] Session token rejected, clearing it")
            self.protocol.invalidate("token rejected")
            raise SessionExpired()
        raise error_for_code(code)

    def calculate_tag(self, request_json: str, seq: int) -> str:
        """Integrity tag sent as the Tapo_tag header."""
        tag_key = sha256_hex(self.session.hashed_password + self.session.client_nonce)
        return sha256_hex(tag_key + request_json + str(seq))
