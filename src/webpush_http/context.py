"""
Context and info strings for Web Push key derivation.

Context format (135 bytes):
┌──────┬─────────┬───────────────┬─────────┬───────────────┐
│ 0x00 │ len(BE) │ client pubkey │ len(BE) │ server pubkey │
│ (1B) │  (2B)   │     (65B)     │  (2B)   │     (65B)     │
└──────┴─────────┴───────────────┴─────────┴───────────────┘

Info format:
    "Content-Encoding: " || label || 0x00 || "P-256" || context

Reference: draft-ietf-httpbis-encryption-encoding-00 §4.2
"""

from webpush_http.constants import AUTH_LABEL, CONTEXT_SIZE, CURVE_NAME, INFO_PREFIX, PUBLIC_KEY_SIZE
from webpush_http.exceptions import InvalidContextLengthError, InvalidKeyLengthError

__all__ = [
    "AUTH_INFO",
    "build_context",
    "build_info",
]

AUTH_INFO = INFO_PREFIX + AUTH_LABEL + b"\x00"

_CURVE_LABEL = CURVE_NAME.encode("ascii")


def build_context(client_public_key: bytes, server_public_key: bytes) -> bytes:
    """
    Serialize both public keys into the key derivation context.

    Args:
        client_public_key: Subscription's uncompressed P-256 key (65 bytes)
        server_public_key: Our ephemeral uncompressed P-256 key (65 bytes)

    Returns:
        135-byte context

    Raises:
        InvalidKeyLengthError: If either key is not 65 bytes
    """
    if len(client_public_key) != PUBLIC_KEY_SIZE:
        raise InvalidKeyLengthError(f"Invalid client public key length: {len(client_public_key)}")
    # Our own key, so this only trips on programming errors
    if len(server_public_key) != PUBLIC_KEY_SIZE:
        raise InvalidKeyLengthError(f"Invalid server public key length: {len(server_public_key)}")

    return (
        b"\x00"
        + len(client_public_key).to_bytes(2, "big")
        + client_public_key
        + len(server_public_key).to_bytes(2, "big")
        + server_public_key
    )


def build_info(label: str | bytes, context: bytes) -> bytes:
    """
    Build an HKDF info string for a content-encoding label.

    Args:
        label: ``aesgcm`` or ``nonce``
        context: Output of build_context()

    Returns:
        Info bytes

    Raises:
        InvalidContextLengthError: If context is not 135 bytes
    """
    if len(context) != CONTEXT_SIZE:
        raise InvalidContextLengthError(f"Context argument has invalid size: {len(context)} (expected {CONTEXT_SIZE})")
    if isinstance(label, str):
        label = label.encode("ascii")
    return INFO_PREFIX + label + b"\x00" + _CURVE_LABEL + context
