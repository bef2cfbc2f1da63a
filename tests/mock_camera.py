# tests/mock_camera.py
"""In-process simulated camera for end-to-end tests.

Stands in for ``HttpTransport.post``: it receives the exact URL, body and
extra headers the client would send over HTTPS and answers with the bytes a
real device would return. Supports both the legacy MD5 login and the secure
3-phase login with the securePassthrough envelope.
"""

import base64
import json

from tapo_cam.crypto import aes_cipher, md5_hex, sha256_hex
from tapo_cam.session_protocol import derive_session_keys


class MockCamera:
    def __init__(self, host="192.168.1.100", username="admin", password="secret",
                 secure=True, hash_algo="sha256", start_seq=100):
        self.host = host
        self.username = username
        self.password = password
        self.secure = secure
        self.hashed_password = sha256_hex(password) if hash_algo == "sha256" else md5_hex(password)
        self.start_seq = start_seq
        self.server_nonce = "5E1F0A2B3C4D5E6F"

        self.requests = []          # (url, payload, extra_headers)
        self.login_count = 0
        self.token_count = 0
        self.valid_token = None
        self.expected_seq = None
        self.cnonce = None
        self.key = None
        self.iv = None

        # Per-method results returned by the command handler
        self.results = {"getDeviceInfo": {"device_info": {"basic_info": {"device_model": "C200"}}}}
        self.inner_error_code = 0
        self.tag_mismatches = 0

    @property
    def base_url(self):
        return f"https://{self.host}:443"

    def expire_token(self):
        self.valid_token = None

    def _issue_token(self):
        self.token_count += 1
        self.valid_token = f"mock_stok_{self.token_count}"
        return self.valid_token

    # ---- transport entry point ----------------------------------------

    def post(self, url, body, extra_headers=None):
        payload = json.loads(body)
        self.requests.append((url, payload, dict(extra_headers or {})))

        if url == self.base_url:
            response = self._handle_login(payload["params"])
        else:
            response = self._handle_command(url, body, payload, extra_headers or {})
        return json.dumps(response).encode("utf-8")

    # ---- login --------------------------------------------------------

    def _handle_login(self, params):
        if params.get("username") != self.username:
            return {"error_code": -40411}

        if "digest_passwd" in params:
            return self._secure_phase3(params)
        if "cnonce" in params:
            return self._secure_phase1(params)
        if params.get("hashed"):
            return self._legacy_login(params)

        # Mode detection probe
        if self.secure:
            return {"error_code": -40413,
                    "result": {"data": {"code": -40413, "encrypt_type": ["3"]}}}
        return {"error_code": -40413, "result": {"data": {"encrypt_type": ["2"]}}}

    def _legacy_login(self, params):
        if self.secure or params.get("password") != md5_hex(self.password):
            return {"error_code": -40411}
        self.login_count += 1
        return {"error_code": 0, "result": {"stok": self._issue_token(), "user_group": "root"}}

    def _secure_phase1(self, params):
        self.cnonce = params["cnonce"]
        confirm = sha256_hex(self.cnonce + self.hashed_password + self.server_nonce)
        return {"error_code": 0, "result": {"data": {
            "nonce": self.server_nonce,
            "device_confirm": confirm + self.server_nonce + self.cnonce,
        }}}

    def _secure_phase3(self, params):
        digest = sha256_hex(self.hashed_password + self.cnonce + self.server_nonce)
        if params["digest_passwd"] != digest + self.cnonce + self.server_nonce:
            return {"error_code": -40411}

        self.login_count += 1
        self.key, self.iv = derive_session_keys(self.cnonce, self.server_nonce, self.hashed_password)
        self.expected_seq = self.start_seq
        return {"error_code": 0, "result": {
            "stok": self._issue_token(), "start_seq": self.start_seq, "user_group": "root"}}

    # ---- commands -----------------------------------------------------

    def _handle_command(self, url, body, payload, headers):
        if url != f"{self.base_url}/stok={self.valid_token}/ds" or self.valid_token is None:
            return {"error_code": -40401}

        if not self.secure:
            return self._dispatch(payload)

        if payload.get("method") != "securePassthrough":
            return {"error_code": -40210}

        seq = int(headers["Seq"])
        tag_key = sha256_hex(self.hashed_password + self.cnonce)
        if seq != self.expected_seq or headers["Tapo_tag"] != sha256_hex(tag_key + body + str(seq)):
            self.tag_mismatches += 1
            return {"error_code": -40401}
        self.expected_seq += 1

        ciphertext = base64.b64decode(payload["params"]["request"])
        inner_request = json.loads(aes_cipher.decrypt(ciphertext, self.key, self.iv))
        inner_response = json.dumps(self._dispatch(inner_request)).encode("utf-8")
        encrypted = aes_cipher.encrypt(inner_response, self.key, self.iv)
        return {"error_code": 0,
                "result": {"response": base64.b64encode(encrypted).decode("ascii")}}

    def _dispatch(self, request):
        if self.inner_error_code:
            return {"error_code": self.inner_error_code}

        if request.get("method") == "multipleRequest":
            responses = [
                {"method": r["method"], "result": self.results.get(r["method"], {}), "error_code": 0}
                for r in request["params"]["requests"]
            ]
            return {"error_code": 0, "result": {"responses": responses}}
        return {"error_code": 0, "result": self.results.get(request.get("method"), {})}
