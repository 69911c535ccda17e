"""
Web Push payload encryption pipeline.

Encrypts a message for a browser push subscription using the ``aesgcm``
content encoding:
- Fresh P-256 key pair and 16-byte salt per message
- ECDH with the subscription's ``p256dh`` key
- HKDF-SHA256 keyed by the subscription's ``auth`` secret
- AES-128-GCM with a padding-length prefix

Usage:
    from webpush_http import encrypt

    result = encrypt("Hello, World.", subscription)
    # result.ciphertext -> HTTP body
    # result.salt -> Encryption: salt=...
    # result.server_public_key -> Crypto-Key: dh=...

Reference: draft-ietf-webpush-encryption-04
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from cryptography.hazmat.primitives.asymmetric import ec

from webpush_http._logging import get_logger
from webpush_http.cipher import decrypt_payload, encrypt_payload
from webpush_http.constants import AUTH_SECRET_SIZE, MAX_PAYLOAD_SIZE, SALT_SIZE
from webpush_http.exceptions import (
    DecryptionError,
    InvalidAuthTokenLengthError,
    InvalidClientKeyError,
    InvalidPeerKeyError,
    MissingEncryptionKeysError,
    MissingMessageError,
    PayloadTooLargeError,
)
from webpush_http.headers import b64url_decode
from webpush_http.kdf import derive_keys
from webpush_http.keys import (
    compute_shared_secret,
    generate_keypair,
    public_key_from_bytes,
    public_key_to_bytes,
)

__all__ = [
    "EncryptionResult",
    "Subscription",
    "SubscriptionKeys",
    "decrypt",
    "encrypt",
]

_logger = get_logger(__name__)


@dataclass(frozen=True)
class SubscriptionKeys:
    """Key material from a browser push subscription (base64url encoded)."""

    p256dh: str | None = None
    auth: str | None = None


@dataclass(frozen=True)
class Subscription:
    """Browser push subscription.

    ``endpoint`` is only needed for delivery, not for encryption.
    """

    endpoint: str | None = None
    keys: SubscriptionKeys | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Subscription:
        """
        Build from the ``PushSubscription.toJSON()`` shape.

        Args:
            data: ``{"endpoint": ..., "keys": {"p256dh": ..., "auth": ...}}``

        Returns:
            Subscription (missing fields become None)
        """
        keys_data = data.get("keys")
        keys = None
        if keys_data:
            keys = SubscriptionKeys(p256dh=keys_data.get("p256dh"), auth=keys_data.get("auth"))
        return cls(endpoint=data.get("endpoint"), keys=keys)

    @classmethod
    def coerce(cls, value: Subscription | Mapping[str, Any] | None) -> Subscription:
        """Accept a Subscription, a toJSON() dict or None."""
        if value is None:
            return cls()
        if isinstance(value, Subscription):
            return value
        return cls.from_dict(value)


SubscriptionLike = Subscription | Mapping[str, Any]


@dataclass(frozen=True)
class EncryptionResult:
    """Output of one encrypt() call. Never reuse across messages."""

    ciphertext: bytes
    salt: bytes
    server_public_key: bytes


def _message_bytes(message: str | bytes | None) -> bytes:
    if message is None:
        raise MissingMessageError("No message to encrypt")
    if isinstance(message, str):
        message = message.encode("utf-8")
    elif not isinstance(message, (bytes, bytearray, memoryview)):
        raise TypeError(f"Message must be str or bytes, got {type(message).__name__}")
    message = bytes(message)
    if not message:
        raise MissingMessageError("No message to encrypt")
    return message


def _client_keys(subscription: Subscription) -> tuple[bytes, bytes]:
    """Decode and validate (client_public_key, auth_secret)."""
    keys = subscription.keys
    if keys is None or not keys.p256dh or not keys.auth:
        raise MissingEncryptionKeysError("Subscription is missing some encryption details")

    try:
        auth_secret = b64url_decode(keys.auth)
    except ValueError as e:
        raise InvalidAuthTokenLengthError(0) from e
    if len(auth_secret) != AUTH_SECRET_SIZE:
        raise InvalidAuthTokenLengthError(len(auth_secret))

    try:
        client_public_key = b64url_decode(keys.p256dh)
        public_key_from_bytes(client_public_key)
    except (ValueError, InvalidPeerKeyError) as e:
        raise InvalidClientKeyError("Subscription's client key (p256dh) is invalid") from e

    return client_public_key, auth_secret


def _validate(
    message: str | bytes | None,
    subscription: SubscriptionLike | None,
    padding_length: int,
) -> tuple[bytes, bytes, bytes]:
    """Run input checks in order. Returns (plaintext, client_public_key, auth_secret)."""
    plaintext = _message_bytes(message)

    if padding_length < 0:
        raise ValueError(f"Padding length must be non-negative, got {padding_length}")
    if len(plaintext) + padding_length > MAX_PAYLOAD_SIZE:
        raise PayloadTooLargeError(MAX_PAYLOAD_SIZE, len(plaintext), padding_length)

    client_public_key, auth_secret = _client_keys(Subscription.coerce(subscription))
    return plaintext, client_public_key, auth_secret


def _encrypt_deterministic(
    message: str | bytes | None,
    subscription: SubscriptionLike | None,
    salt: bytes,
    server_private_key: ec.EllipticCurvePrivateKey,
    padding_length: int = 0,
) -> EncryptionResult:
    """Encrypt with caller-supplied salt and server key. For known-answer tests only."""
    plaintext, client_public_key, auth_secret = _validate(message, subscription, padding_length)
    if len(salt) != SALT_SIZE:
        raise ValueError(f"Salt must be {SALT_SIZE} bytes, got {len(salt)}")

    server_public_key = public_key_to_bytes(server_private_key.public_key())
    shared_secret = compute_shared_secret(server_private_key, client_public_key)
    derived = derive_keys(shared_secret, auth_secret, salt, client_public_key, server_public_key)
    ciphertext = encrypt_payload(plaintext, derived.content_encryption_key, derived.nonce, padding_length)

    _logger.debug(
        "Payload encrypted: plaintext_size=%d padding=%d ciphertext_size=%d",
        len(plaintext),
        padding_length,
        len(ciphertext),
    )
    return EncryptionResult(ciphertext=ciphertext, salt=salt, server_public_key=server_public_key)


def encrypt(
    message: str | bytes | None,
    subscription: SubscriptionLike | None,
    padding_length: int = 0,
) -> EncryptionResult:
    """
    Encrypt a message for a push subscription.

    Checks run in this order, first failure wins:
    message present, size limit, keys present, auth length, p256dh validity.

    Args:
        message: Payload (str is UTF-8 encoded)
        subscription: Subscription or its ``toJSON()`` dict; only ``keys`` is used
        padding_length: Extra zero bytes to hide the message length

    Returns:
        EncryptionResult with ciphertext, salt and server public key

    Raises:
        MissingMessageError: No message or empty message
        PayloadTooLargeError: Message plus padding exceeds 4078 bytes
        MissingEncryptionKeysError: ``p256dh`` or ``auth`` missing
        InvalidAuthTokenLengthError: ``auth`` is not 16 bytes
        InvalidClientKeyError: ``p256dh`` is not a valid P-256 point
    """
    # Validate before spending randomness on a doomed call
    _validate(message, subscription, padding_length)
    server_private_key, _ = generate_keypair()
    return _encrypt_deterministic(message, subscription, os.urandom(SALT_SIZE), server_private_key, padding_length)


def decrypt(
    ciphertext: bytes,
    salt: bytes,
    server_public_key: bytes,
    client_private_key: ec.EllipticCurvePrivateKey,
    auth_secret: bytes,
) -> bytes:
    """
    Decrypt a push message as the user agent would.

    Args:
        ciphertext: Encrypted body
        salt: Value of the ``Encryption: salt=`` parameter
        server_public_key: Value of the ``Crypto-Key: dh=`` parameter
        client_private_key: Subscription's private key
        auth_secret: Subscription's 16-byte auth secret

    Returns:
        Plaintext with padding removed

    Raises:
        DecryptionError: If any input is malformed or the tag does not verify
    """
    if len(salt) != SALT_SIZE:
        raise DecryptionError(f"Salt must be {SALT_SIZE} bytes, got {len(salt)}")
    if len(auth_secret) != AUTH_SECRET_SIZE:
        raise DecryptionError(f"Auth secret must be {AUTH_SECRET_SIZE} bytes, got {len(auth_secret)}")

    client_public_key = public_key_to_bytes(client_private_key.public_key())
    try:
        shared_secret = compute_shared_secret(client_private_key, server_public_key)
    except InvalidPeerKeyError as e:
        raise DecryptionError("Invalid server public key") from e

    derived = derive_keys(shared_secret, auth_secret, salt, client_public_key, server_public_key)
    return decrypt_payload(ciphertext, derived.content_encryption_key, derived.nonce)
