"""Per-endpoint authentication tokens for push services that require them."""

import threading
from dataclasses import dataclass

from webpush_http._logging import get_logger

__all__ = [
    "AuthTokenEntry",
    "AuthTokenRegistry",
]

_logger = get_logger(__name__)


@dataclass(frozen=True)
class AuthTokenEntry:
    """Token used for endpoints containing ``pattern``."""

    pattern: str
    token: str

    def __repr__(self) -> str:
        return f"AuthTokenEntry(pattern={self.pattern!r}, token=<redacted>)"


class AuthTokenRegistry:
    """
    Ordered list of (pattern, token) pairs.

    An endpoint uses the token of the first registered pattern that is a
    plain, case-sensitive substring of it. Duplicate patterns are kept,
    so earlier registrations take precedence.

    Safe to share between threads and between senders.

    Example:
        registry = AuthTokenRegistry()
        registry.register("https://android.googleapis.com/gcm/send", api_key)
        registry.resolve(endpoint)  # -> api_key or None
    """

    def __init__(self) -> None:
        self._entries: list[AuthTokenEntry] = []
        self._lock = threading.Lock()

    def register(self, pattern: str, token: str) -> None:
        """
        Append a token for endpoints containing ``pattern``.

        Raises:
            ValueError: If pattern or token is empty
        """
        if not pattern:
            raise ValueError("Auth token pattern must not be empty")
        if not token:
            raise ValueError("Auth token must not be empty")
        with self._lock:
            self._entries.append(AuthTokenEntry(pattern=pattern, token=token))
            count = len(self._entries)
        _logger.debug("Auth token registered: pattern=%s entries=%d", pattern, count)

    def resolve(self, endpoint: str) -> str | None:
        """Return the token for ``endpoint``, or None when no pattern matches."""
        with self._lock:
            for entry in self._entries:
                if entry.pattern in endpoint:
                    return entry.token
        return None

    @property
    def entries(self) -> tuple[AuthTokenEntry, ...]:
        """Snapshot of registered entries in match order."""
        with self._lock:
            return tuple(self._entries)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
