"""Ephemeral P-256 key agreement for Web Push encryption."""

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from webpush_http.constants import PRIVATE_KEY_SIZE, PUBLIC_KEY_SIZE, UNCOMPRESSED_POINT_PREFIX
from webpush_http.exceptions import InvalidPeerKeyError

__all__ = [
    "compute_shared_secret",
    "generate_keypair",
    "private_key_from_bytes",
    "public_key_from_bytes",
    "public_key_to_bytes",
]

_CURVE = ec.SECP256R1()


def generate_keypair() -> tuple[ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey]:
    """
    Generate a fresh P-256 key pair.

    A new pair must be generated for every encrypted message.

    Returns:
        Tuple of (private_key, public_key)
    """
    private_key = ec.generate_private_key(_CURVE)
    return private_key, private_key.public_key()


def public_key_to_bytes(public_key: ec.EllipticCurvePublicKey) -> bytes:
    """Serialize a P-256 public key as a 65-byte uncompressed point."""
    return public_key.public_bytes(Encoding.X962, PublicFormat.UncompressedPoint)


def public_key_from_bytes(data: bytes) -> ec.EllipticCurvePublicKey:
    """
    Load a P-256 public key from its uncompressed point encoding.

    Args:
        data: 65 bytes, ``0x04 || X || Y``

    Returns:
        Public key

    Raises:
        InvalidPeerKeyError: If the length or prefix is wrong, or the point is not on the curve
    """
    if len(data) != PUBLIC_KEY_SIZE:
        raise InvalidPeerKeyError(f"Public key must be {PUBLIC_KEY_SIZE} bytes, got {len(data)}")
    if data[0] != UNCOMPRESSED_POINT_PREFIX:
        raise InvalidPeerKeyError(f"Public key must be an uncompressed point (prefix 0x04), got 0x{data[0]:02x}")
    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(_CURVE, data)
    except ValueError as e:
        raise InvalidPeerKeyError("Public key is not a valid point on P-256") from e


def private_key_from_bytes(data: bytes) -> ec.EllipticCurvePrivateKey:
    """
    Load a P-256 private key from its 32-byte big-endian scalar.

    Args:
        data: Raw private scalar

    Returns:
        Private key

    Raises:
        ValueError: If the scalar is the wrong size or out of range
    """
    if len(data) != PRIVATE_KEY_SIZE:
        raise ValueError(f"Private key must be {PRIVATE_KEY_SIZE} bytes, got {len(data)}")
    return ec.derive_private_key(int.from_bytes(data, "big"), _CURVE)


def compute_shared_secret(
    private_key: ec.EllipticCurvePrivateKey,
    peer_public_key: bytes | ec.EllipticCurvePublicKey,
) -> bytes:
    """
    Perform P-256 ECDH.

    Args:
        private_key: Our private key
        peer_public_key: Their public key, as an object or 65 raw bytes

    Returns:
        32-byte shared secret (x-coordinate of the shared point)

    Raises:
        InvalidPeerKeyError: If raw peer key bytes are malformed
    """
    if isinstance(peer_public_key, bytes):
        peer_public_key = public_key_from_bytes(peer_public_key)
    return private_key.exchange(ec.ECDH(), peer_public_key)
