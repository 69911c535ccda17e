"""
HTTP transports for push delivery.

A transport performs one POST and reports (status, reason, body). It does
not retry and adds no timeout of its own; configure timeouts on the
underlying session/client if bounded latency is needed.

Usage:
    async with AiohttpTransport(timeout=aiohttp.ClientTimeout(total=10)) as transport:
        response = await transport.post(url, headers, body)
"""

import types
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import aiohttp
from typing_extensions import Self

from webpush_http._logging import get_logger

__all__ = [
    "AiohttpTransport",
    "HttpxTransport",
    "PushTransport",
    "TransportResponse",
]

_logger = get_logger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    """Raw response from the push service."""

    status: int
    reason: str
    body: bytes


@runtime_checkable
class PushTransport(Protocol):
    """Anything that can POST an encrypted push message."""

    async def post(self, url: str, headers: dict[str, str], body: bytes) -> TransportResponse:
        """Send one request. Network failures raise the client's own errors."""
        ...

    async def close(self) -> None:
        """Release resources owned by the transport."""
        ...


class AiohttpTransport:
    """
    Transport backed by aiohttp.ClientSession.

    The session is created lazily on first use unless one is passed in.
    A session passed in by the caller is never closed by the transport.
    """

    def __init__(self, session: aiohttp.ClientSession | None = None, **session_kwargs: Any) -> None:
        """
        Initialize aiohttp transport.

        Args:
            session: Existing session to reuse (caller keeps ownership)
            **session_kwargs: Arguments for aiohttp.ClientSession when one is created here
        """
        self._session = session
        self._owns_session = session is None
        self._session_kwargs = session_kwargs

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

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(**self._session_kwargs)
            self._owns_session = True
        return self._session

    async def post(self, url: str, headers: dict[str, str], body: bytes) -> TransportResponse:
        """
        POST body to url.

        Raises:
            aiohttp.ClientError: On connection or protocol failure
        """
        session = self._get_session()
        async with session.post(url, headers=headers, data=body) as resp:
            content = await resp.read()
            _logger.debug("aiohttp response: url=%s status=%d size=%d", url, resp.status, len(content))
            return TransportResponse(status=resp.status, reason=resp.reason or "", body=content)

    async def close(self) -> None:
        """Close the session if this transport created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None


class HttpxTransport:
    """
    Transport backed by httpx.AsyncClient.

    Requires the ``httpx`` extra: pip install webpush-http[httpx]
    """

    def __init__(self, client: Any = None, **client_kwargs: Any) -> None:
        """
        Initialize httpx transport.

        Args:
            client: Existing httpx.AsyncClient to reuse (caller keeps ownership)
            **client_kwargs: Arguments for httpx.AsyncClient when one is created here
        """
        self._client = client
        self._owns_client = client is None
        self._client_kwargs = client_kwargs

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

    def _get_client(self) -> Any:
        if self._client is None:
            try:
                import httpx
            except ImportError as e:
                raise ImportError("HttpxTransport requires 'httpx'. Install with: pip install webpush-http[httpx]") from e
            self._client = httpx.AsyncClient(**self._client_kwargs)
            self._owns_client = True
        return self._client

    async def post(self, url: str, headers: dict[str, str], body: bytes) -> TransportResponse:
        """
        POST body to url.

        Raises:
            httpx.HTTPError: On connection or protocol failure
        """
        client = self._get_client()
        resp = await client.post(url, headers=headers, content=body)
        _logger.debug("httpx response: url=%s status=%d size=%d", url, resp.status_code, len(resp.content))
        return TransportResponse(status=resp.status_code, reason=resp.reason_phrase, body=resp.content)

    async def close(self) -> None:
        """Close the client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
