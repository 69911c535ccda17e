"""
Web Push payload encryption and delivery.

This library encrypts messages for browser push subscriptions using the
``aesgcm`` content encoding (P-256 ECDH, HKDF-SHA256, AES-128-GCM) and
delivers them to the subscription's push endpoint.

Usage (encryption only):
    from webpush_http import encrypt

    result = encrypt("Hello, World.", subscription)

Usage (delivery - aiohttp):
    from webpush_http import WebPushSender

    async with WebPushSender(ttl=60) as sender:
        sender.add_auth_token("https://android.googleapis.com/gcm/send", gcm_api_key)
        result = await sender.send(subscription, "Hello, World.")
        if result.expired:
            forget(subscription)
"""

from webpush_http.constants import CONTENT_ENCODING, MAX_PAYLOAD_SIZE
from webpush_http.encryption import EncryptionResult, Subscription, SubscriptionKeys, decrypt, encrypt
from webpush_http.exceptions import (
    DecryptionError,
    DeliveryError,
    EncryptionError,
    InvalidAuthTokenLengthError,
    InvalidClientKeyError,
    InvalidContextLengthError,
    InvalidKeyLengthError,
    InvalidPeerKeyError,
    MissingAuthTokenError,
    MissingEncryptionKeysError,
    MissingEndpointError,
    MissingMessageError,
    PayloadTooLargeError,
    WebPushError,
)
from webpush_http.registry import AuthTokenEntry, AuthTokenRegistry
from webpush_http.sender import DeliveryResult, DeliveryStatus, WebPushSender, send_web_push
from webpush_http.transport import AiohttpTransport, HttpxTransport, PushTransport, TransportResponse

__all__ = [
    # Constants
    "CONTENT_ENCODING",
    "MAX_PAYLOAD_SIZE",
    # Encryption
    "EncryptionResult",
    "Subscription",
    "SubscriptionKeys",
    "decrypt",
    "encrypt",
    # Delivery
    "AuthTokenEntry",
    "AuthTokenRegistry",
    "DeliveryResult",
    "DeliveryStatus",
    "WebPushSender",
    "send_web_push",
    # Transports
    "AiohttpTransport",
    "HttpxTransport",
    "PushTransport",
    "TransportResponse",
    # Exceptions
    "DecryptionError",
    "DeliveryError",
    "EncryptionError",
    "InvalidAuthTokenLengthError",
    "InvalidClientKeyError",
    "InvalidContextLengthError",
    "InvalidKeyLengthError",
    "InvalidPeerKeyError",
    "MissingAuthTokenError",
    "MissingEncryptionKeysError",
    "MissingEndpointError",
    "MissingMessageError",
    "PayloadTooLargeError",
    "WebPushError",
]

__version__ = "0.1.0"
