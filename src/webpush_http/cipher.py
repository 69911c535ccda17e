"""
AES-128-GCM payload encryption with a padding-length prefix.

Record format (before encryption):
┌───────────────┬────────────────┬───────────┐
│ pad_len (BE)  │ zeros(pad_len) │ plaintext │
│     (2B)      │                │           │
└───────────────┴────────────────┴───────────┘

The 16-byte GCM tag is appended to the ciphertext.
"""

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from webpush_http.constants import (
    AES_GCM_TAG_SIZE,
    CONTENT_ENCRYPTION_KEY_SIZE,
    MAX_PADDING_LENGTH,
    NONCE_SIZE,
    PADDING_LENGTH_PREFIX_SIZE,
)
from webpush_http.exceptions import DecryptionError

__all__ = [
    "decrypt_payload",
    "encrypt_payload",
]


def _check_key_and_nonce(key: bytes, nonce: bytes) -> None:
    if len(key) != CONTENT_ENCRYPTION_KEY_SIZE:
        raise ValueError(f"Content encryption key must be {CONTENT_ENCRYPTION_KEY_SIZE} bytes, got {len(key)}")
    if len(nonce) != NONCE_SIZE:
        raise ValueError(f"Nonce must be {NONCE_SIZE} bytes, got {len(nonce)}")


def encrypt_payload(plaintext: bytes, key: bytes, nonce: bytes, padding_length: int = 0) -> bytes:
    """
    Pad and encrypt a plaintext.

    Args:
        plaintext: Message bytes
        key: 16-byte content encryption key
        nonce: 12-byte nonce
        padding_length: Extra zero bytes placed before the plaintext

    Returns:
        Ciphertext with tag: 2 + padding_length + len(plaintext) + 16 bytes

    Raises:
        ValueError: If key/nonce sizes are wrong or padding_length is out of range
    """
    _check_key_and_nonce(key, nonce)
    if not 0 <= padding_length <= MAX_PADDING_LENGTH:
        raise ValueError(f"Padding length must be between 0 and {MAX_PADDING_LENGTH}, got {padding_length}")

    record = padding_length.to_bytes(PADDING_LENGTH_PREFIX_SIZE, "big") + b"\x00" * padding_length + plaintext
    return AESGCM(key).encrypt(nonce, record, None)


def decrypt_payload(ciphertext: bytes, key: bytes, nonce: bytes) -> bytes:
    """
    Decrypt a ciphertext and strip its padding.

    Args:
        ciphertext: Output of encrypt_payload()
        key: 16-byte content encryption key
        nonce: 12-byte nonce

    Returns:
        Original plaintext

    Raises:
        DecryptionError: If the tag does not verify or the padding is malformed
    """
    _check_key_and_nonce(key, nonce)
    if len(ciphertext) < PADDING_LENGTH_PREFIX_SIZE + AES_GCM_TAG_SIZE:
        raise DecryptionError(f"Ciphertext too short: {len(ciphertext)} bytes")

    try:
        record = AESGCM(key).decrypt(nonce, ciphertext, None)
    except InvalidTag as e:
        raise DecryptionError("Authentication tag verification failed") from e

    padding_length = int.from_bytes(record[:PADDING_LENGTH_PREFIX_SIZE], "big")
    body_start = PADDING_LENGTH_PREFIX_SIZE + padding_length
    if body_start > len(record):
        raise DecryptionError(f"Padding length {padding_length} exceeds record size")
    if any(record[PADDING_LENGTH_PREFIX_SIZE:body_start]):
        raise DecryptionError("Padding contains non-zero bytes")
    return record[body_start:]
