"""Credential caching in front of a token provider."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from pbi_export.adapters.auth.base import TokenProvider
from pbi_export.core.logging_safety import safe_log_identifier
from pbi_export.schemas.auth import Credential

logger = logging.getLogger(__name__)


class CachingTokenProvider(TokenProvider):
    """Reuses credentials keyed by (client id, scope) until they near expiry.

    The cache is guarded by an ``asyncio.Lock`` so concurrent runs sharing this
    provider wait for a single refresh instead of each calling the identity
    endpoint.
    """

    def __init__(
        self,
        inner: TokenProvider,
        *,
        refresh_margin_seconds: float = 300,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._inner = inner
        self._refresh_margin_seconds = refresh_margin_seconds
        self._clock = clock
        self._entries: dict[tuple[str, str], Credential] = {}
        self._lock = asyncio.Lock()

    @property
    def cache_key(self) -> tuple[str, str]:
        return self._inner.cache_key

    def _is_fresh(self, credential: Credential) -> bool:
        return credential.expires_on - self._clock() > self._refresh_margin_seconds

    async def acquire(self) -> Credential:
        key = self._inner.cache_key
        async with self._lock:
            cached = self._entries.get(key)
            if cached is not None and self._is_fresh(cached):
                return cached

            credential = await self._inner.acquire()
            self._entries[key] = credential
            logger.debug(
                "auth.cache_refreshed client_id=%s expires_on=%s",
                safe_log_identifier(key[0], prefix="client"),
                credential.expires_on,
            )
            return credential

    def invalidate(self) -> None:
        self._entries.clear()

    async def close(self) -> None:
        self._entries.clear()
        await self._inner.close()


__all__ = ["CachingTokenProvider"]
