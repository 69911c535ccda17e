"""Unit tests for WebPushSender.

Uses a recording transport in place of the network; transports themselves
are exercised against real servers in test_transport.py.
"""

from dataclasses import dataclass, field
from typing import Any

import pytest

from webpush_http.encryption import decrypt, encrypt
from webpush_http.exceptions import (
    InvalidClientKeyError,
    MissingAuthTokenError,
    MissingEncryptionKeysError,
    MissingEndpointError,
    MissingMessageError,
    PayloadTooLargeError,
)
from webpush_http.headers import b64url_decode
from webpush_http.registry import AuthTokenRegistry
from webpush_http.sender import (
    DeliveryResult,
    DeliveryStatus,
    WebPushSender,
    build_headers,
    is_legacy_endpoint,
    rewrite_endpoint,
    send_web_push,
)
from webpush_http.transport import PushTransport, TransportResponse

from tests.conftest import (
    GCM_ENDPOINT,
    GCM_WEBPUSH_ENDPOINT,
    INVALID_P256DH_SUBSCRIPTION,
    VALID_SUBSCRIPTION,
    UserAgent,
)


@dataclass
class RecordingTransport:
    """Transport that records requests and replays a canned response."""

    response: TransportResponse = field(default_factory=lambda: TransportResponse(201, "Created", b""))
    error: BaseException | None = None
    requests: list[tuple[str, dict[str, str], bytes]] = field(default_factory=list)
    closed: bool = False

    async def post(self, url: str, headers: dict[str, str], body: bytes) -> TransportResponse:
        self.requests.append((url, headers, body))
        if self.error is not None:
            raise self.error
        return self.response

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport(response=TransportResponse(200, "Status message", b"Response body"))


class TestEndpointRewrite:
    """Test legacy GCM endpoint handling."""

    def test_gcm_endpoint_rewritten(self) -> None:
        assert rewrite_endpoint(GCM_ENDPOINT) == GCM_WEBPUSH_ENDPOINT

    def test_suffix_preserved_exactly(self) -> None:
        suffix = "/reg:ID_with-odd~chars%20?x=1"
        assert rewrite_endpoint("https://android.googleapis.com/gcm/send" + suffix) == (
            "https://gcm-http.googleapis.com/gcm" + suffix
        )

    @pytest.mark.parametrize(
        "endpoint",
        [
            "https://example-endpoint.com/example/1234",
            "https://updates.push.services.mozilla.com/wpush/v1/abc",
            # Only a prefix match counts
            "https://proxy.test/?u=https://android.googleapis.com/gcm/send/abc",
        ],
    )
    def test_other_endpoints_unchanged(self, endpoint: str) -> None:
        assert rewrite_endpoint(endpoint) == endpoint
        assert not is_legacy_endpoint(endpoint)


class TestBuildHeaders:
    """Test delivery headers."""

    def test_required_headers(self) -> None:
        headers = build_headers(encrypt("Hello", VALID_SUBSCRIPTION))

        assert set(headers) == {"Content-Encoding", "Encryption", "Crypto-Key"}
        assert headers["Content-Encoding"] == "aesgcm"
        assert len(headers["Encryption"]) == 27
        assert len(headers["Crypto-Key"]) == 90

    def test_optional_headers(self) -> None:
        headers = build_headers(encrypt("Hello", VALID_SUBSCRIPTION), auth_token="AAAA", ttl=0)

        assert headers["Authorization"] == "key=AAAA"
        assert headers["TTL"] == "0"


class TestDeliveryResult:
    """Test response classification."""

    @pytest.mark.parametrize("status_code", [400, 404, 410, 413, 499])
    def test_4xx_is_expired(self, status_code: int) -> None:
        result = DeliveryResult.from_response(status_code, "Gone", b"body")

        assert result.status is DeliveryStatus.EXPIRED_SUBSCRIPTION
        assert result.expired
        assert result.status_code == status_code
        assert result.body == b"body"

    @pytest.mark.parametrize("status_code", [200, 201, 202, 301, 399, 500, 503])
    def test_other_statuses_are_delivered(self, status_code: int) -> None:
        result = DeliveryResult.from_response(status_code, "Whatever", b"")

        assert result.status is DeliveryStatus.DELIVERED
        assert not result.expired


class TestSend:
    """Test WebPushSender.send()."""

    async def test_web_push_request(self, transport: RecordingTransport) -> None:
        sender = WebPushSender(transport=transport)

        result = await sender.send(VALID_SUBSCRIPTION, "Hello, World!")

        assert result.status_code == 200
        assert result.status_message == "Status message"
        assert result.body == b"Response body"
        assert result.status is DeliveryStatus.DELIVERED

        [(url, headers, body)] = transport.requests
        assert url == VALID_SUBSCRIPTION["endpoint"]
        assert isinstance(body, bytes)
        assert len(body) == 2 + 13 + 16
        assert len(headers["Encryption"]) == 27
        assert len(headers["Crypto-Key"]) == 90
        assert headers["Content-Encoding"] == "aesgcm"
        assert "Authorization" not in headers
        assert "TTL" not in headers

    async def test_recipient_can_decrypt(self, transport: RecordingTransport, user_agent: UserAgent) -> None:
        sender = WebPushSender(transport=transport, padding_length=16)

        await sender.send(user_agent.subscription(), "Hello, World.")

        [(_, headers, body)] = transport.requests
        plaintext = decrypt(
            body,
            b64url_decode(headers["Encryption"].removeprefix("salt=")),
            b64url_decode(headers["Crypto-Key"].removeprefix("dh=")),
            user_agent.private_key,
            user_agent.auth_secret,
        )
        assert plaintext == b"Hello, World."

    async def test_gcm_request(self, transport: RecordingTransport) -> None:
        sender = WebPushSender(transport=transport)
        sender.add_auth_token("https://android.googleapis.com/gcm/send", "AAAA")
        subscription = {"endpoint": GCM_ENDPOINT, "keys": VALID_SUBSCRIPTION["keys"]}

        result = await sender.send(subscription, "Hello, World!")

        assert result.status_code == 200
        [(url, headers, _)] = transport.requests
        assert url == GCM_WEBPUSH_ENDPOINT
        assert headers["Authorization"] == "key=AAAA"

    async def test_token_matched_on_rewritten_endpoint(self, transport: RecordingTransport) -> None:
        sender = WebPushSender(transport=transport)
        sender.add_auth_token("https://gcm-http.googleapis.com/gcm", "BBBB")
        subscription = {"endpoint": GCM_ENDPOINT, "keys": VALID_SUBSCRIPTION["keys"]}

        await sender.send(subscription, "Hello, World!")

        assert transport.requests[0][1]["Authorization"] == "key=BBBB"

    async def test_token_for_plain_endpoint(self, transport: RecordingTransport) -> None:
        sender = WebPushSender(transport=transport)
        sender.add_auth_token("example-endpoint.com", "CCCC")

        await sender.send(VALID_SUBSCRIPTION, "Hello, World!")

        assert transport.requests[0][1]["Authorization"] == "key=CCCC"

    async def test_gcm_without_token_fails_before_io(self, transport: RecordingTransport) -> None:
        sender = WebPushSender(transport=transport)
        subscription = {"endpoint": GCM_ENDPOINT, "keys": VALID_SUBSCRIPTION["keys"]}

        with pytest.raises(MissingAuthTokenError, match="auth token"):
            await sender.send(subscription, "Hello, World!")

        assert transport.requests == []

    async def test_ttl_header(self, transport: RecordingTransport) -> None:
        sender = WebPushSender(transport=transport, ttl=60)

        await sender.send(VALID_SUBSCRIPTION, "Hello")

        assert transport.requests[0][1]["TTL"] == "60"

    async def test_expired_subscription(self) -> None:
        transport = RecordingTransport(response=TransportResponse(410, "Gone", b"push subscription has unsubscribed"))
        sender = WebPushSender(transport=transport)

        result = await sender.send(VALID_SUBSCRIPTION, "Hello")

        assert result.expired
        assert result.status is DeliveryStatus.EXPIRED_SUBSCRIPTION
        assert result.status_code == 410
        assert result.status_message == "Gone"
        assert result.body == b"push subscription has unsubscribed"

    async def test_server_error_returned_as_outcome(self) -> None:
        transport = RecordingTransport(response=TransportResponse(503, "Service Unavailable", b""))

        result = await WebPushSender(transport=transport).send(VALID_SUBSCRIPTION, "Hello")

        assert not result.expired
        assert result.status_code == 503
        assert len(transport.requests) == 1

    async def test_transport_error_propagates_unchanged(self) -> None:
        error = ConnectionResetError("Example Error")
        transport = RecordingTransport(error=error)

        with pytest.raises(ConnectionResetError) as exc:
            await WebPushSender(transport=transport).send(VALID_SUBSCRIPTION, "Hello")

        assert exc.value is error
        assert len(transport.requests) == 1

    @pytest.mark.parametrize("subscription", [None, {}, {"keys": VALID_SUBSCRIPTION["keys"]}, {"endpoint": ""}])
    async def test_missing_endpoint(self, transport: RecordingTransport, subscription: Any) -> None:
        with pytest.raises(MissingEndpointError):
            await WebPushSender(transport=transport).send(subscription, "Hello")
        assert transport.requests == []

    @pytest.mark.parametrize(
        ("subscription", "message", "error"),
        [
            (VALID_SUBSCRIPTION, None, MissingMessageError),
            (VALID_SUBSCRIPTION, "", MissingMessageError),
            (VALID_SUBSCRIPTION, "x" * 4079, PayloadTooLargeError),
            ({"endpoint": "http://fakendpoint"}, "Hello, World!", MissingEncryptionKeysError),
            (INVALID_P256DH_SUBSCRIPTION, "Hello, World!", InvalidClientKeyError),
        ],
    )
    async def test_encryption_errors_propagate(
        self,
        transport: RecordingTransport,
        subscription: Any,
        message: Any,
        error: type[Exception],
    ) -> None:
        with pytest.raises(error):
            await WebPushSender(transport=transport).send(subscription, message)
        assert transport.requests == []


class TestSenderLifecycle:
    """Test registry sharing and transport ownership."""

    def test_shared_registry(self) -> None:
        registry = AuthTokenRegistry()
        first = WebPushSender(registry, RecordingTransport())
        second = WebPushSender(registry, RecordingTransport())

        first.add_auth_token("pattern", "token")

        assert second.registry.resolve("xx-pattern-xx") == "token"

    def test_private_registry_by_default(self) -> None:
        first = WebPushSender(transport=RecordingTransport())
        first.add_auth_token("pattern", "token")

        assert WebPushSender(transport=RecordingTransport()).registry.resolve("pattern") is None

    async def test_injected_transport_left_open(self, transport: RecordingTransport) -> None:
        async with WebPushSender(transport=transport):
            pass
        assert not transport.closed

    async def test_send_web_push_helper(self, transport: RecordingTransport) -> None:
        registry = AuthTokenRegistry()
        registry.register("https://android.googleapis.com/gcm/send", "AAAA")
        subscription = {"endpoint": GCM_ENDPOINT, "keys": VALID_SUBSCRIPTION["keys"]}

        result = await send_web_push(subscription, "Hello, World!", registry=registry, transport=transport, ttl=30)

        assert result.status_code == 200
        [(url, headers, _)] = transport.requests
        assert url == GCM_WEBPUSH_ENDPOINT
        assert headers["Authorization"] == "key=AAAA"
        assert headers["TTL"] == "30"
        assert not transport.closed

    def test_recording_transport_satisfies_protocol(self) -> None:
        assert isinstance(RecordingTransport(), PushTransport)

    @pytest.mark.parametrize(("kwargs", "match"), [({"ttl": -1}, "TTL"), ({"padding_length": -1}, "Padding")])
    def test_rejects_negative_settings(self, kwargs: dict[str, int], match: str) -> None:
        with pytest.raises(ValueError, match=match):
            WebPushSender(transport=RecordingTransport(), **kwargs)
