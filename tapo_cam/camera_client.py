import logging
from typing import Any, Dict, Optional

from tapo_cam.http_transport import HttpTransport
from tapo_cam.protocol.models import Payload, Session
from tapo_cam.secure_channel import SecureChannel
from tapo_cam.session_protocol import AuthState, SessionProtocol


class CameraClient:
    """
    Entry point used by feature handlers (PTZ, LED, presets, ...).

    Wraps one Session with its handshake and command channel. Calls are
    blocking and the object is not thread-safe: use one client per
    concurrent camera connection, or serialize access with your own lock.
    Errors are raised as ``tapo_cam.protocol.TapoError`` subclasses.
    """

    def __init__(self, host: str, username: str, password: str,
                 timeout: Optional[float] = None, logger=None):
        self.logger = logger or logging.getLogger(__name__)
        self.session = Session(host=host, username=username, password=password)
        self.transport = HttpTransport(host, timeout=timeout, logger=self.logger)
        self.protocol = SessionProtocol(self.session, self.transport, logger=self.logger)
        self.channel = SecureChannel(self.session, self.transport, self.protocol, logger=self.logger)

    @property
    def state(self) -> AuthState:
        return self.protocol.state

    @property
    def is_secure(self) -> Optional[bool]:
        """True/False once mode detection has run, None before."""
        return self.session.secure_mode

    def authenticate(self) -> None:
        self.protocol.authenticate()

    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    def get_session_token(self) -> str:
        return self.session.session_token

    def execute(self, method: str, params: Optional[Payload] = None) -> Dict[str, Any]:
        return self.channel.execute(method, params)

    def execute_direct(self, payload: Payload) -> Dict[str, Any]:
        return self.channel.execute_direct(payload)
