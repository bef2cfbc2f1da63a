"""Hashing and symmetric cipher helpers for the login handshake and envelope."""

from .hashing import generate_nonce, md5_hex, sha256_bytes, sha256_hex
from .aes_cipher import decrypt, encrypt, pkcs7_pad, pkcs7_unpad

__all__ = [
    'md5_hex',
    'sha256_hex',
    'sha256_bytes',
    'generate_nonce',
    'encrypt',
    'decrypt',
    'pkcs7_pad',
    'pkcs7_unpad',
]
