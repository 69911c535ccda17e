"""
Web Push delivery.

Encrypts a message for a subscription, builds the ``aesgcm`` headers and
POSTs the ciphertext to the subscription's endpoint. One attempt per call,
no retries.

Usage:
    async with WebPushSender(ttl=60) as sender:
        sender.add_auth_token("https://android.googleapis.com/gcm/send", gcm_api_key)
        result = await sender.send(subscription, "Hello, World.")
        if result.expired:
            forget(subscription)
"""

import enum
import types
from dataclasses import dataclass

from typing_extensions import Self

from webpush_http._logging import get_logger
from webpush_http.constants import (
    CONTENT_ENCODING,
    GCM_URL,
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_ENCODING,
    HEADER_CRYPTO_KEY,
    HEADER_ENCRYPTION,
    HEADER_TTL,
    TEMP_GCM_URL,
)
from webpush_http.encryption import EncryptionResult, Subscription, SubscriptionLike, encrypt
from webpush_http.exceptions import MissingAuthTokenError, MissingEndpointError
from webpush_http.headers import header_field
from webpush_http.registry import AuthTokenRegistry
from webpush_http.transport import AiohttpTransport, PushTransport

__all__ = [
    "DeliveryResult",
    "DeliveryStatus",
    "WebPushSender",
    "build_headers",
    "is_legacy_endpoint",
    "rewrite_endpoint",
    "send_web_push",
]

_logger = get_logger(__name__)


class DeliveryStatus(str, enum.Enum):
    """How the push service answered."""

    DELIVERED = "delivered"
    EXPIRED_SUBSCRIPTION = "expired_subscription"


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of one delivery attempt.

    Any status outside [400, 500) is reported as DELIVERED; callers
    interpret other statuses themselves.
    """

    status: DeliveryStatus
    status_code: int
    status_message: str
    body: bytes

    @property
    def expired(self) -> bool:
        """True when the subscription should be dropped."""
        return self.status is DeliveryStatus.EXPIRED_SUBSCRIPTION

    @classmethod
    def from_response(cls, status_code: int, status_message: str, body: bytes) -> "DeliveryResult":
        """Classify a push service response."""
        status = DeliveryStatus.EXPIRED_SUBSCRIPTION if 400 <= status_code < 500 else DeliveryStatus.DELIVERED
        return cls(status=status, status_code=status_code, status_message=status_message, body=body)


def is_legacy_endpoint(endpoint: str) -> bool:
    """Whether endpoint points at the legacy GCM gateway."""
    return endpoint.startswith(GCM_URL)


def rewrite_endpoint(endpoint: str) -> str:
    """
    Map legacy GCM endpoints onto the Web Push compatible gateway.

    The registration id after the base URL is kept byte-for-byte.
    Other endpoints are returned unchanged.
    """
    if is_legacy_endpoint(endpoint):
        return TEMP_GCM_URL + endpoint[len(GCM_URL) :]
    return endpoint


def build_headers(
    result: EncryptionResult,
    *,
    auth_token: str | None = None,
    ttl: int | None = None,
) -> dict[str, str]:
    """
    Build delivery headers for an encrypted payload.

    Args:
        result: Output of encrypt()
        auth_token: Token for ``Authorization: key=<token>``
        ttl: Seconds the push service may hold the message

    Returns:
        Headers dict
    """
    headers = {
        HEADER_CONTENT_ENCODING: CONTENT_ENCODING,
        HEADER_ENCRYPTION: header_field("salt", result.salt),
        HEADER_CRYPTO_KEY: header_field("dh", result.server_public_key),
    }
    if auth_token:
        headers[HEADER_AUTHORIZATION] = f"key={auth_token}"
    if ttl is not None:
        headers[HEADER_TTL] = str(ttl)
    return headers


class WebPushSender:
    """
    Sends encrypted push messages to subscription endpoints.

    Features:
    - Per-sender auth token registry (share one by passing it in)
    - Legacy GCM endpoint rewriting
    - Pluggable transport (aiohttp by default)
    - 4xx responses classified as expired subscriptions
    """

    def __init__(
        self,
        registry: AuthTokenRegistry | None = None,
        transport: PushTransport | None = None,
        *,
        ttl: int | None = None,
        padding_length: int = 0,
    ) -> None:
        """
        Initialize sender.

        Args:
            registry: Auth token registry (a private one is created if None)
            transport: HTTP transport (an AiohttpTransport owned by the sender if None)
            ttl: Value for the TTL header; omitted when None
            padding_length: Padding bytes added to every message
        """
        if ttl is not None and ttl < 0:
            raise ValueError(f"TTL must be non-negative, got {ttl}")
        if padding_length < 0:
            raise ValueError(f"Padding length must be non-negative, got {padding_length}")

        self.registry = registry if registry is not None else AuthTokenRegistry()
        self.ttl = ttl
        self.padding_length = padding_length
        self._owns_transport = transport is None
        self._transport: PushTransport = transport if transport is not None else AiohttpTransport()

    async def __aenter__(self) -> Self:
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the transport if the sender created it."""
        if self._owns_transport:
            await self._transport.close()

    def add_auth_token(self, pattern: str, token: str) -> None:
        """Use ``token`` for endpoints containing ``pattern``."""
        self.registry.register(pattern, token)

    def _resolve_auth_token(self, endpoint: str, target: str) -> str | None:
        token = self.registry.resolve(endpoint)
        if token is None and target != endpoint:
            token = self.registry.resolve(target)
        if token is None and is_legacy_endpoint(endpoint):
            raise MissingAuthTokenError(endpoint)
        _logger.debug("Auth token lookup: endpoint=%s found=%s", target, token is not None)
        return token

    def prepare(
        self,
        subscription: SubscriptionLike | None,
        message: str | bytes | None,
    ) -> tuple[str, dict[str, str], bytes]:
        """
        Validate, encrypt and build the request without sending it.

        Returns:
            Tuple of (url, headers, body)

        Raises:
            MissingEndpointError: Subscription has no endpoint
            MissingAuthTokenError: Legacy GCM endpoint without a registered token
            EncryptionError: Any encryption input failure (see encrypt())
        """
        sub = Subscription.coerce(subscription)
        if not sub.endpoint:
            raise MissingEndpointError("Subscription has no endpoint")

        endpoint = sub.endpoint
        target = rewrite_endpoint(endpoint)
        if target != endpoint:
            _logger.debug("Legacy endpoint rewritten: to=%s", TEMP_GCM_URL)

        result = encrypt(message, sub, self.padding_length)
        auth_token = self._resolve_auth_token(endpoint, target)
        headers = build_headers(result, auth_token=auth_token, ttl=self.ttl)
        return target, headers, result.ciphertext

    async def send(
        self,
        subscription: SubscriptionLike | None,
        message: str | bytes | None,
    ) -> DeliveryResult:
        """
        Encrypt and deliver a message.

        Args:
            subscription: Subscription or its ``toJSON()`` dict
            message: Payload (str is UTF-8 encoded)

        Returns:
            DeliveryResult; ``expired`` is True for 4xx responses

        Raises:
            MissingEndpointError: Subscription has no endpoint
            MissingAuthTokenError: Legacy GCM endpoint without a registered token
            EncryptionError: Any encryption input failure (see encrypt())
            Exception: Transport errors propagate unchanged
        """
        url, headers, body = self.prepare(subscription, message)
        _logger.debug("Push request: url=%s body_size=%d", url, len(body))

        response = await self._transport.post(url, headers, body)

        result = DeliveryResult.from_response(response.status, response.reason, response.body)
        if result.expired:
            _logger.debug("Subscription expired: url=%s status=%d", url, response.status)
        else:
            _logger.debug("Push delivered: url=%s status=%d", url, response.status)
        return result


async def send_web_push(
    subscription: SubscriptionLike | None,
    message: str | bytes | None,
    *,
    registry: AuthTokenRegistry | None = None,
    transport: PushTransport | None = None,
    ttl: int | None = None,
    padding_length: int = 0,
) -> DeliveryResult:
    """
    Send a single push message with a temporary sender.

    See WebPushSender.send() for errors. A transport passed in is left open.
    """
    async with WebPushSender(registry, transport, ttl=ttl, padding_length=padding_length) as sender:
        return await sender.send(subscription, message)
