"""Credential cache: bearer tokens keyed by identity with expiry tracking."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessToken:
    """A bearer token and the epoch second it stops being valid."""

    token: str = field(repr=False)
    expires_at: float | None = None


@dataclass
class CredentialCache:
    """Registry of access tokens with expiration.

    A token is treated as expired ``refresh_margin_s`` seconds before its
    ``expires_at`` so a request never leaves with a token about to lapse.
    Tokens without an expiry are never cached.
    """

    refresh_margin_s: float = 60.0
    clock: Callable[[], float] = time.time
    _entries: dict[str, AccessToken] = field(default_factory=dict)

    def get(self, key: str) -> AccessToken | None:
        """Get token if cached and not expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at is None or (
            self.clock() >= entry.expires_at - self.refresh_margin_s
        ):
            del self._entries[key]
            return None
        return entry

    def set(self, key: str, token: AccessToken) -> None:
        """Store a token; tokens with no known expiry are not kept."""
        if token.expires_at is None:
            return
        self._entries[key] = token

    def invalidate(self, key: str) -> None:
        """Drop any cached token for *key*."""
        self._entries.pop(key, None)

    def get_or_fetch(self, key: str, fetch: Callable[[], AccessToken]) -> AccessToken:
        """Return the cached token for *key*, refreshing through *fetch* when stale."""
        cached = self.get(key)
        if cached is not None:
            return cached
        logger.debug("Fetching fresh access token for %s", key)
        token = fetch()
        self.set(key, token)
        return token
