"""
HTTP header utilities for Web Push delivery.

Uses base64url encoding (RFC 4648 §5) without padding for header values.
"""

import base64
import binascii

from webpush_http.constants import (
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_ENCODING,
    HEADER_CRYPTO_KEY,
    HEADER_ENCRYPTION,
    HEADER_TTL,
)

__all__ = [
    "HEADER_AUTHORIZATION",
    "HEADER_CONTENT_ENCODING",
    "HEADER_CRYPTO_KEY",
    "HEADER_ENCRYPTION",
    "HEADER_TTL",
    "b64url_decode",
    "b64url_encode",
    "header_field",
]


def b64url_encode(data: bytes) -> str:
    """
    Encode bytes to base64url string without padding.

    Args:
        data: Raw bytes to encode

    Returns:
        base64url encoded string (no padding)
    """
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(s: str) -> bytes:
    """
    Decode base64url string to bytes.

    Handles missing padding automatically. Standard base64 characters
    (``+`` and ``/``) are accepted too, since browsers and older servers
    emit both alphabets for subscription keys.

    Args:
        s: base64url encoded string (with or without padding)

    Returns:
        Decoded bytes

    Raises:
        ValueError: If the input is not valid base64
    """
    s = s.strip().rstrip("=")
    # Add padding if needed (base64 uses 4-byte blocks)
    padding = len(s) % 4
    if padding:
        s += "=" * (4 - padding)
    try:
        return base64.urlsafe_b64decode(s)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 data: {e}") from e


def header_field(name: str, value: bytes) -> str:
    """
    Build a ``name=<base64url>`` header parameter.

    Args:
        name: Parameter name (e.g. ``salt``, ``dh``)
        value: Raw parameter value

    Returns:
        Header parameter string
    """
    return f"{name}={b64url_encode(value)}"
