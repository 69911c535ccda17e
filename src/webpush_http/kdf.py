"""
HKDF-SHA256 key derivation for Web Push encryption.

Only a single expand round is needed here (all outputs are <= 32 bytes),
so expand is T(1) = HMAC-SHA256(PRK, info || 0x01), truncated.

Derivation sequence:
    PRK   = HKDF(auth_secret, ecdh_secret, "Content-Encoding: auth\\0", 32)
    CEK   = HKDF(salt, PRK, info("aesgcm", context), 16)
    NONCE = HKDF(salt, PRK, info("nonce", context), 12)

Reference: RFC 5869, draft-ietf-webpush-encryption-04 §3.3
"""

from dataclasses import dataclass

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac

from webpush_http.constants import (
    AESGCM_LABEL,
    CONTENT_ENCRYPTION_KEY_SIZE,
    HKDF_MAX_SINGLE_ROUND,
    NONCE_LABEL,
    NONCE_SIZE,
    PRK_SIZE,
)
from webpush_http.context import AUTH_INFO, build_context, build_info

__all__ = [
    "DerivedKeys",
    "derive_keys",
    "hkdf",
    "hkdf_expand_one",
    "hkdf_extract",
]


def _hmac_sha256(key: bytes, *parts: bytes) -> bytes:
    h = crypto_hmac.HMAC(key, hashes.SHA256())
    for part in parts:
        h.update(part)
    return h.finalize()


def hkdf_extract(salt: bytes, ikm: bytes) -> bytes:
    """HKDF-Extract: PRK = HMAC-SHA256(salt, IKM).

    An empty salt is replaced by HashLen zero bytes (RFC 5869 §2.2).
    """
    if not salt:
        salt = b"\x00" * PRK_SIZE
    return _hmac_sha256(salt, ikm)


def hkdf_expand_one(prk: bytes, info: bytes, length: int) -> bytes:
    """
    Single-round HKDF-Expand.

    Args:
        prk: Pseudorandom key from hkdf_extract()
        info: Context-specific info string
        length: Output length (1-32)

    Returns:
        First ``length`` bytes of HMAC-SHA256(PRK, info || 0x01)

    Raises:
        ValueError: If length needs more than one expand round
    """
    if not 0 < length <= HKDF_MAX_SINGLE_ROUND:
        raise ValueError(f"Output length must be between 1 and {HKDF_MAX_SINGLE_ROUND}, got {length}")
    return _hmac_sha256(prk, info, b"\x01")[:length]


def hkdf(salt: bytes, ikm: bytes, info: bytes, length: int) -> bytes:
    """
    HKDF-SHA256 restricted to a single expand round.

    Matches RFC 5869 output for any length up to 32 bytes.

    Args:
        salt: Extract salt (HMAC key)
        ikm: Input keying material
        info: Context-specific info string
        length: Output length (1-32)

    Returns:
        Derived key material
    """
    return hkdf_expand_one(hkdf_extract(salt, ikm), info, length)


@dataclass(frozen=True)
class DerivedKeys:
    """Key material derived for one encrypted message."""

    prk: bytes
    content_encryption_key: bytes
    nonce: bytes

    def __repr__(self) -> str:
        return "DerivedKeys(<redacted>)"


def derive_keys(
    shared_secret: bytes,
    auth_secret: bytes,
    salt: bytes,
    client_public_key: bytes,
    server_public_key: bytes,
) -> DerivedKeys:
    """
    Run the full derivation sequence for one message.

    Args:
        shared_secret: ECDH output
        auth_secret: Subscription's 16-byte auth secret
        salt: 16 random bytes, fresh per message
        client_public_key: Subscription's uncompressed P-256 key
        server_public_key: Ephemeral uncompressed P-256 key

    Returns:
        DerivedKeys with PRK, content encryption key and nonce
    """
    prk = hkdf(auth_secret, shared_secret, AUTH_INFO, PRK_SIZE)
    context = build_context(client_public_key, server_public_key)
    return DerivedKeys(
        prk=prk,
        content_encryption_key=hkdf(salt, prk, build_info(AESGCM_LABEL, context), CONTENT_ENCRYPTION_KEY_SIZE),
        nonce=hkdf(salt, prk, build_info(NONCE_LABEL, context), NONCE_SIZE),
    )
