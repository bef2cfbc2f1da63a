# tapo_cam/protocol/constants.py

# Request envelope methods
METHOD_LOGIN = "login"
METHOD_MULTIPLE_REQUEST = "multipleRequest"
METHOD_SECURE_PASSTHROUGH = "securePassthrough"

# Key derivation labels
KEY_LABEL = "lsk"
IV_LABEL = "ivb"

# Secure-mode transport headers
HEADER_SEQ = "Seq"
HEADER_TAG = "Tapo_tag"
