"""In-process access token cache.

Shares short-lived bearer tokens between concurrent archive invocations
so that only one client credentials exchange runs per identity while a
token is still valid.
"""

import asyncio
from typing import Awaitable, Callable, Dict, Hashable, Optional, Protocol, TypeVar


class ExpiringToken(Protocol):
    @property
    def is_expired(self) -> bool: ...


T = TypeVar("T", bound=ExpiringToken)


class InMemoryTokenCache:
    """Token cache keyed by identity (e.g. ``(tenant_id, client_id)``).

    Reads never wait on the lock. A miss takes the single writer lock and
    re-checks before fetching, so callers racing on the same key share one
    exchange.

    WARNING: Tokens are lost on restart and are not shared across processes.
    """

    def __init__(self):
        self._tokens: Dict[Hashable, ExpiringToken] = {}
        self._lock = asyncio.Lock()

    def get(self, key: Hashable) -> Optional[ExpiringToken]:
        """Return the cached token for ``key`` unless it has expired."""
        token = self._tokens.get(key)
        if token is None or token.is_expired:
            return None
        return token

    async def get_or_fetch(self, key: Hashable, fetch: Callable[[], Awaitable[T]]) -> T:
        """Return a valid cached token, fetching and storing one on a miss.

        Errors raised by ``fetch`` propagate and nothing is cached.
        """
        token = self.get(key)
        if token is not None:
            return token

        async with self._lock:
            token = self.get(key)
            if token is not None:
                return token
            token = await fetch()
            self._tokens[key] = token
            return token

    def clear(self) -> None:
        self._tokens.clear()
