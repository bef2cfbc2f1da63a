"""AES-128-CBC with PKCS#7 padding for the securePassthrough envelope.

Key and IV are the 16-byte values derived during the secure login
(``lsk`` / ``ivb``). Padding always adds between 1 and 16 bytes, so a
plaintext that is already block aligned gains a full extra block.
"""

from Crypto.Cipher import AES
from Crypto.Util.Padding import pad, unpad

from tapo_cam.protocol.errors import InvalidCiphertextLength, InvalidKeyMaterial, InvalidPadding

BLOCK_SIZE = AES.block_size  # 16
KEY_SIZE = 16


def _check_key_material(key: bytes, iv: bytes) -> None:
    if not key or len(key) != KEY_SIZE:
        raise InvalidKeyMaterial(f"key must be {KEY_SIZE} bytes for AES-128, got {len(key or b'')}")
    if not iv or len(iv) != BLOCK_SIZE:
        raise InvalidKeyMaterial(f"iv must be {BLOCK_SIZE} bytes, got {len(iv or b'')}")


def pkcs7_pad(data: bytes) -> bytes:
    return pad(data, BLOCK_SIZE, style="pkcs7")


def pkcs7_unpad(data: bytes) -> bytes:
    """Strip PKCS#7 padding from block-aligned data.

    Only whole AES blocks are accepted, as produced by ``decrypt``.

    Raises:
        InvalidPadding: empty or non-aligned input, a pad byte of 0 or
            larger than the block, or pad bytes that do not all carry the
            pad value.
    """
    try:
        return unpad(data, BLOCK_SIZE, style="pkcs7")
    except ValueError as e:
        raise InvalidPadding(f"invalid padding: {e}") from e


def encrypt(plaintext: bytes, key: bytes, iv: bytes) -> bytes:
    _check_key_material(key, iv)
    cipher = AES.new(key, AES.MODE_CBC, iv)
    return cipher.encrypt(pkcs7_pad(plaintext))


def decrypt(ciphertext: bytes, key: bytes, iv: bytes) -> bytes:
    _check_key_material(key, iv)
    if len(ciphertext) % BLOCK_SIZE != 0:
        raise InvalidCiphertextLength(
            f"ciphertext length {len(ciphertext)} is not a multiple of the block size"
        )
    cipher = AES.new(key, AES.MODE_CBC, iv)
    return pkcs7_unpad(cipher.decrypt(ciphertext))
