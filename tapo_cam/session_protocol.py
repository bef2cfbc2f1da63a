import logging
from enum import Enum, auto
from typing import Tuple

from tapo_cam import config
from tapo_cam.crypto import generate_nonce, md5_hex, sha256_bytes, sha256_hex
from tapo_cam.http_transport import HttpTransport, dump_json, load_json
from tapo_cam.protocol.constants import IV_LABEL, KEY_LABEL
from tapo_cam.protocol.errors import (
    AuthenticationFailed,
    DeviceError,
    ErrorCode,
    Phase,
    error_for_code,
    in_phase,
)
from tapo_cam.protocol.models import LoginResult, Session, login_request


class AuthState(Enum):
    UNAUTHENTICATED = auto()
    DETECTING_MODE = auto()
    LEGACY_LOGIN = auto()
    SECURE_PHASE1 = auto()
    SECURE_PHASE2 = auto()
    SECURE_PHASE3 = auto()
    AUTHENTICATED = auto()


def derive_session_keys(cnonce: str, nonce: str, hashed_password: str) -> Tuple[bytes, bytes]:
    """Derive the 16-byte AES key (lsk) and IV (ivb) for a secure session."""
    hashed_key = sha256_hex(cnonce + hashed_password + nonce)
    key = sha256_bytes(KEY_LABEL + cnonce + nonce + hashed_key)[:16]
    iv = sha256_bytes(IV_LABEL + cnonce + nonce + hashed_key)[:16]
    return key, iv


class SessionProtocol:
    """
    Login handshake against the camera.

    Flow:
    Detection: login with encrypt_type=3 and no nonce. A "login required"
               reply listing encrypt type 3 selects the secure handshake.
    Legacy:    single login with the MD5 password hash.
    Secure:    Phase 1 exchanges nonces, Phase 2 picks the password hash the
               device confirms and derives the AES key/IV, Phase 3 proves
               the password and receives the token and start sequence.

    Mode detection runs once per Session; later re-authentications reuse it.
    A failed attempt leaves the Session unauthenticated with no nonce, hash
    or key from that attempt.
    """

    def __init__(self, session: Session, transport: HttpTransport, logger=None):
        self.session = session
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)
        self._state = AuthState.UNAUTHENTICATED

    @property
    def state(self) -> AuthState:
        return self._state

    def _set_state(self, new_state: AuthState, reason: str = ""):
        if self._state != new_state:
            self.logger.info(f"[STATE] {self._state.name} → {new_state.name} ({reason})")
            self._state = new_state

    def authenticate(self) -> None:
        """Run the full handshake. Raises TapoError tagged with the failing phase."""
        self.session.clear_credentials()
        self.logger.info(f"[AUTH] Authenticating {self.session.username}@{self.session.host}")

        try:
            if self.session.secure_mode is None:
                self._set_state(AuthState.DETECTING_MODE, "first login")
                with in_phase(Phase.DETECTION):
                    self.session.secure_mode = self.detect_secure_mode()
                self.logger.info(
                    f"[AUTH] Device uses {'secure' if self.session.secure_mode else 'legacy'} login"
                )

            if self.session.secure_mode:
                self._secure_login()
            else:
                self._legacy_login()
        except Exception as e:
            self.session.clear_credentials()
            self._set_state(AuthState.UNAUTHENTICATED, "handshake failed")
            self.logger.error(f"[AUTH] Authentication failed: {e}")
            raise

        self._set_state(AuthState.AUTHENTICATED, "token issued")

    def invalidate(self, reason: str) -> None:
        """Drop the session token after the device rejected it."""
        self.session.expire_token()
        self._set_state(AuthState.UNAUTHENTICATED, reason)

    def detect_secure_mode(self) -> bool:
        result = self._login(login_request(
            self.session.username,
            encrypt_type=config.SECURE_ENCRYPT_TYPE,
        ))
        return (
            result.error_code == ErrorCode.LOGIN_REQUIRED
            and config.SECURE_ENCRYPT_TYPE in result.encrypt_types
        )

    def _legacy_login(self) -> None:
        self._set_state(AuthState.LEGACY_LOGIN, "legacy device")
        with in_phase(Phase.LEGACY_LOGIN):
            hashed_password = md5_hex(self.session.password)
            result = self._login(login_request(
                self.session.username,
                hashed=True,
                password=hashed_password,
            ))
            if result.error_code != 0:
                raise error_for_code(result.error_code)
            if not result.stok:
                raise DeviceError(ErrorCode.GENERAL, "login response carried no session token")

        self.session.hashed_password = hashed_password
        self.session.session_token = result.stok
        self.logger.info(f"[LOGIN] ✓ Legacy login ok (stok={result.stok[:6]}...)")

    def _secure_login(self) -> None:
        with in_phase(Phase.SECURE_PHASE1):
            device_confirm = self._phase1_exchange_nonces()
        with in_phase(Phase.SECURE_PHASE2):
            self._phase2_select_hash(device_confirm)
        with in_phase(Phase.SECURE_PHASE3):
            self._phase3_complete_login()

    def _phase1_exchange_nonces(self) -> str:
        self._set_state(AuthState.SECURE_PHASE1, "requesting server nonce")
        self.session.client_nonce = generate_nonce()

        result = self._login(login_request(
            self.session.username,
            cnonce=self.session.client_nonce,
            encrypt_type=config.SECURE_ENCRYPT_TYPE,
        ))
        if result.error_code != 0 or not result.nonce:
            raise DeviceError(result.error_code, "failed to get server nonce")

        self.session.server_nonce = result.nonce
        self.logger.debug("[PHASE 1] Server nonce received")
        return result.device_confirm

    def _phase2_select_hash(self, device_confirm: str) -> None:
        self._set_state(AuthState.SECURE_PHASE2, "validating device")

        for algorithm, candidate in (("SHA256", sha256_hex), ("MD5", md5_hex)):
            hashed_password = candidate(self.session.password)
            if self.validate_device_confirm(hashed_password, device_confirm):
                self.logger.debug(f"[PHASE 2] Device confirmed {algorithm} password hash")
                break
        else:
            raise AuthenticationFailed()

        self.session.hashed_password = hashed_password
        self.session.cipher_key, self.session.cipher_iv = derive_session_keys(
            self.session.client_nonce, self.session.server_nonce, hashed_password
        )

    def _phase3_complete_login(self) -> None:
        self._set_state(AuthState.SECURE_PHASE3, "sending digest")
        cnonce = self.session.client_nonce
        nonce = self.session.server_nonce
        digest = sha256_hex(self.session.hashed_password + cnonce + nonce)

        result = self._login(login_request(
            self.session.username,
            cnonce=cnonce,
            encrypt_type=config.SECURE_ENCRYPT_TYPE,
            digest_passwd=digest + cnonce + nonce,
        ))
        if result.error_code != 0:
            raise error_for_code(result.error_code)
        if not result.stok:
            raise DeviceError(ErrorCode.GENERAL, "login response carried no session token")

        self.session.session_token = result.stok
        self.session.sequence_counter = result.start_seq
        self.logger.info(
            f"[LOGIN] ✓ Secure login ok (stok={result.stok[:6]}..., seq={result.start_seq})"
        )

    def validate_device_confirm(self, hashed_password: str, device_confirm: str) -> bool:
        cnonce = self.session.client_nonce
        nonce = self.session.server_nonce
        expected = sha256_hex(cnonce + hashed_password + nonce) + nonce + cnonce
        return device_confirm == expected

    def _login(self, request) -> LoginResult:
        body = self.transport.post(self.session.base_url, dump_json(request))
        response = load_json(body, "login response")
        return LoginResult.from_response(response)
