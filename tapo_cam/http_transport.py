import json
import logging
import warnings
from typing import Any, Dict, Optional

import requests
from urllib3.exceptions import InsecureRequestWarning

from tapo_cam import config
from tapo_cam.protocol.errors import SerializationError, TransportError

# The camera serves a self-signed certificate; we do not verify it.
warnings.simplefilter("ignore", InsecureRequestWarning)


def dump_json(payload: Dict[str, Any]) -> str:
    """Compact JSON, the exact text that is sent and tagged."""
    try:
        return json.dumps(payload, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise SerializationError(f"failed to marshal request: {e}") from e


def load_json(body: bytes, what: str = "response") -> Dict[str, Any]:
    try:
        data = json.loads(body)
    except (UnicodeDecodeError, ValueError) as e:
        raise SerializationError(f"failed to parse {what}: {e}") from e
    if not isinstance(data, dict):
        raise SerializationError(f"failed to parse {what}: expected a JSON object")
    return data


class HttpTransport:
    """
    Blocking HTTPS POST against the camera's control API.

    One request per call, ``Connection: close``, no pooling and no retry.
    TLS verification is disabled because the device certificate is
    self-signed.
    """

    def __init__(self, host: str, timeout: Optional[float] = None, logger=None):
        self.host = host
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self.logger = logger or logging.getLogger(__name__)

    def default_headers(self) -> Dict[str, str]:
        return {
            "Host": f"{self.host}:{config.CAM_PORT}",
            "Referer": f"https://{self.host}",
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "User-Agent": config.USER_AGENT,
            "Connection": "close",
            "requestByApp": config.REQUEST_BY_APP,
            "Content-Type": "application/json; charset=UTF-8",
        }

    def post(self, url: str, body: str, extra_headers: Optional[Dict[str, str]] = None) -> bytes:
        """POST ``body`` to ``url`` and return the raw response body.

        The HTTP status code is not interpreted; the camera reports errors
        in the JSON ``error_code`` field.

        Raises:
            TransportError: connection refused, timeout, TLS failure.
        """
        headers = self.default_headers()
        if extra_headers:
            headers.update(extra_headers)

        self.logger.debug(f"[HTTP] POST {self._redact(url)} ({len(body)} bytes)")
        try:
            response = requests.post(
                url,
                data=body.encode("utf-8"),
                headers=headers,
                timeout=self.timeout,
                verify=False,
            )
        except requests.RequestException as e:
            raise TransportError(f"request failed: {e}") from e

        self.logger.debug(f"[HTTP] Response {response.status_code} ({len(response.content)} bytes)")
        return response.content

    @staticmethod
    def _redact(url: str) -> str:
        # Keep session tokens out of the logs
        head, sep, tail = url.partition("/stok=")
        if not sep:
            return url
        return f"{head}/stok=***/{tail.partition('/')[2]}"
