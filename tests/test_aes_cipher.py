# tests/test_aes_cipher.py
import os

import pytest

from tapo_cam.crypto import aes_cipher
from tapo_cam.protocol.errors import (
    CryptoError,
    ErrorKind,
    InvalidCiphertextLength,
    InvalidKeyMaterial,
    InvalidPadding,
)

KEY = b"1234567890123456"
IV = b"abcdefghijklmnop"


@pytest.mark.parametrize("plaintext", [
    b"Hello, Tapo Camera!",
    b"",
    b"x" * 16,
    b'{"method":"multipleRequest","params":{"requests":[]}}',
    os.urandom(100),
])
def test_encrypt_decrypt_roundtrip(plaintext):
    ciphertext = aes_cipher.encrypt(plaintext, KEY, IV)
    assert len(ciphertext) % 16 == 0
    assert aes_cipher.decrypt(ciphertext, KEY, IV) == plaintext


def test_empty_plaintext_is_one_padding_block():
    # b"" pads to sixteen 0x10 bytes
    ciphertext = aes_cipher.encrypt(b"", bytes(16), bytes(16))
    assert len(ciphertext) == 16
    assert ciphertext != bytes(16)
    assert aes_cipher.decrypt(ciphertext, bytes(16), bytes(16)) == b""


def test_block_aligned_plaintext_gets_extra_block():
    assert len(aes_cipher.encrypt(b"a" * 16, KEY, IV)) == 32


@pytest.mark.parametrize("input_len, expected_len", [
    (0, 16),
    (1, 16),
    (15, 16),
    (16, 32),
    (17, 32),
    (31, 32),
    (32, 48),
])
def test_pkcs7_padding_length(input_len, expected_len):
    padded = aes_cipher.pkcs7_pad(b"a" * input_len)
    assert len(padded) == expected_len
    pad_len = expected_len - input_len
    assert 1 <= pad_len <= 16
    assert padded[-pad_len:] == bytes([pad_len]) * pad_len


@pytest.mark.parametrize("data", [
    b"",                             # empty
    b"\x00",                         # pad byte 0
    bytes([20]),                     # pad larger than data
    b"A" * 15 + b"\x00",             # aligned, pad byte 0
    bytes([17]) * 16,                # pad byte above block size
    b"A" * 13 + b"\x01\x03\x03",     # pad bytes disagree
    b"abc\x01",                      # valid pad byte, not block aligned
])
def test_pkcs7_unpad_rejects_invalid_padding(data):
    with pytest.raises(InvalidPadding):
        aes_cipher.pkcs7_unpad(data)


def test_pkcs7_unpad_strips_valid_padding():
    assert aes_cipher.pkcs7_unpad(b"A" * 13 + b"\x03\x03\x03") == b"A" * 13
    assert aes_cipher.pkcs7_unpad(bytes([16]) * 16) == b""


@pytest.mark.parametrize("key, iv", [
    (b"short", IV),
    (KEY, b"short"),
    (KEY * 2, IV),
    (None, IV),
])
def test_encrypt_rejects_bad_key_material(key, iv):
    with pytest.raises(InvalidKeyMaterial):
        aes_cipher.encrypt(b"test", key, iv)


def test_decrypt_rejects_bad_key_material():
    ciphertext = aes_cipher.encrypt(b"test", KEY, IV)
    with pytest.raises(InvalidKeyMaterial):
        aes_cipher.decrypt(ciphertext, b"short", IV)
    with pytest.raises(InvalidKeyMaterial):
        aes_cipher.decrypt(ciphertext, KEY, b"short")


def test_decrypt_rejects_unaligned_ciphertext():
    with pytest.raises(InvalidCiphertextLength):
        aes_cipher.decrypt(b"not a multiple", KEY, IV)


def test_crypto_errors_share_kind():
    with pytest.raises(CryptoError) as excinfo:
        aes_cipher.decrypt(b"abc", KEY, IV)
    assert excinfo.value.kind is ErrorKind.CRYPTO
