"""Shared test fixtures for webpush_http tests."""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from webpush_http.headers import b64url_encode
from webpush_http.keys import generate_keypair, public_key_to_bytes

# Enable webpush_http debug logging during tests
logging.getLogger("webpush_http").setLevel(logging.DEBUG)
logging.getLogger("webpush_http").addHandler(logging.StreamHandler())


# === Fixed Subscriptions ===

# Subscription used by the reference test-suite; keys mix padded base64url
VALID_SUBSCRIPTION: dict[str, Any] = {
    "endpoint": "https://example-endpoint.com/example/1234",
    "keys": {
        "auth": "8eDyX_uCN0XRhSbY5hs7Hg==",
        "p256dh": "BCIWgsnyXDv1VkhqL2P7YRBvdeuDnlwAPT2guNhdIoW3IP7GmHh1SMKPLxRf7x8vJy6ZFK3ol2ohgn_-0yP7QQA=",
    },
}

INVALID_AUTH_SUBSCRIPTION: dict[str, Any] = {
    "endpoint": "https://example-endpoint.com/example/1234",
    "keys": {
        "auth": "uCN0XRhSbY5hs7Hg==",
        "p256dh": VALID_SUBSCRIPTION["keys"]["p256dh"],
    },
}

INVALID_P256DH_SUBSCRIPTION: dict[str, Any] = {
    "endpoint": "https://example-endpoint.com/example/1234",
    "keys": {
        "auth": VALID_SUBSCRIPTION["keys"]["auth"],
        "p256dh": "6ZFK3ol2ohgn_-0yP7QQA=",
    },
}

GCM_ENDPOINT = (
    "https://android.googleapis.com/gcm/send/AAAAAAAAAAA:AAA91AAAA2_A7AAAAAAAAAAAAAAAAAAAAAAAAAAA9AAAAA9AAA"
    "_AAAA8AAAAAA5-AAAAAA2AAAA_AAAAA4A51A_A3AAA1AAAAAAAAAAAAAAA3AAAAAAAAA6AA2AAAAAAAA80AAAAAA"
)
GCM_WEBPUSH_ENDPOINT = (
    "https://gcm-http.googleapis.com/gcm/AAAAAAAAAAA:AAA91AAAA2_A7AAAAAAAAAAAAAAAAAAAAAAAAAAA9AAAAA9AAA"
    "_AAAA8AAAAAA5-AAAAAA2AAAA_AAAAA4A51A_A3AAA1AAAAAAAAAAAAAAA3AAAAAAAAA6AA2AAAAAAAA80AAAAAA"
)


@pytest.fixture
def valid_subscription() -> dict[str, Any]:
    """Fixed subscription with valid keys (private key unknown)."""
    return VALID_SUBSCRIPTION


# === Generated Subscriptions ===


@dataclass
class UserAgent:
    """Browser-side key material for a generated subscription."""

    private_key: ec.EllipticCurvePrivateKey
    public_key: bytes
    auth_secret: bytes
    endpoint: str

    def subscription(self) -> dict[str, Any]:
        """Subscription in PushSubscription.toJSON() shape."""
        return {
            "endpoint": self.endpoint,
            "keys": {
                "p256dh": b64url_encode(self.public_key),
                "auth": b64url_encode(self.auth_secret),
            },
        }


@pytest.fixture
def user_agent_factory() -> Callable[[str], UserAgent]:
    """Factory for user agents with fresh keys.

    Usage:
        def test_something(user_agent_factory):
            ua = user_agent_factory("https://push.example.test/abc")
    """

    def _make(endpoint: str = "https://push.example.test/ep") -> UserAgent:
        private_key, public_key = generate_keypair()
        return UserAgent(
            private_key=private_key,
            public_key=public_key_to_bytes(public_key),
            auth_secret=secrets.token_bytes(16),
            endpoint=endpoint,
        )

    return _make


@pytest.fixture
def user_agent(user_agent_factory: Callable[[str], UserAgent]) -> UserAgent:
    """User agent with fresh keys and a plain Web Push endpoint."""
    return user_agent_factory("https://push.example.test/ep")
