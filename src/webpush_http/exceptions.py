"""
Exception hierarchy for webpush_http.

All errors inherit from WebPushError for easy catching. Input validation
errors are raised before any I/O. Transport errors from the HTTP client are
never wrapped and reach the caller unchanged.
"""


class WebPushError(Exception):
    """Base exception for all webpush_http errors."""


# =============================================================================
# ENCRYPTION
# =============================================================================


class EncryptionError(WebPushError):
    """Payload could not be encrypted for the subscription."""


class MissingMessageError(EncryptionError):
    """No message (or an empty one) was supplied.

    Header-only pushes are not supported.
    """


class PayloadTooLargeError(EncryptionError):
    """Message plus padding does not fit in a single record."""

    def __init__(self, max_length: int, message_length: int, padding_length: int) -> None:
        self.max_length = max_length
        self.message_length = message_length
        self.padding_length = padding_length
        super().__init__(
            f"Payload is too large. The max number of bytes is {max_length}, "
            f"input is {message_length} bytes plus {padding_length} bytes of padding."
        )


class MissingEncryptionKeysError(EncryptionError):
    """Subscription has no ``keys`` or lacks ``p256dh``/``auth``."""


class InvalidAuthTokenLengthError(EncryptionError):
    """Subscription's ``auth`` secret does not decode to 16 bytes."""

    def __init__(self, length: int) -> None:
        self.length = length
        super().__init__(f"Subscription's auth secret is not 16 bytes (got {length})")


class InvalidClientKeyError(EncryptionError):
    """Subscription's ``p256dh`` key is not a valid P-256 public key."""


class InvalidPeerKeyError(EncryptionError):
    """Peer public key is not a 65-byte uncompressed point on P-256."""


class InvalidKeyLengthError(EncryptionError):
    """Public key passed to the context builder is not 65 bytes."""


class InvalidContextLengthError(EncryptionError):
    """Context passed to the info builder is not 135 bytes."""


# =============================================================================
# DECRYPTION
# =============================================================================


class DecryptionError(WebPushError):
    """Failed to decrypt ciphertext.

    Possible causes:
    - Wrong key material or auth secret
    - Corrupted or truncated ciphertext
    - Invalid authentication tag
    - Malformed padding
    """


# =============================================================================
# DELIVERY
# =============================================================================


class DeliveryError(WebPushError):
    """Push message could not be handed to the transport."""


class MissingEndpointError(DeliveryError):
    """Subscription has no endpoint to deliver to."""


class MissingAuthTokenError(DeliveryError):
    """Endpoint requires an auth token but none is registered for it."""

    def __init__(self, endpoint: str) -> None:
        self.endpoint = endpoint
        super().__init__(
            "GCM requires an auth token. Register one with add_auth_token() for a pattern matching the endpoint."
        )
