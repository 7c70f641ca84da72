"""Static bearer token provider for local development and tests."""

from __future__ import annotations

import time
from collections.abc import Callable

from pbi_export.adapters.auth.base import TokenProvider
from pbi_export.errors import AuthenticationError
from pbi_export.schemas.auth import Credential

_NOMINAL_LIFETIME_SECONDS = 3600


class StaticTokenProvider(TokenProvider):
    """Hands out a preconfigured token.

    The token is never refreshed; each credential is stamped with a nominal
    one-hour expiry from the time it is issued.
    """

    def __init__(self, token: str, *, scope: str = "static", clock: Callable[[], float] = time.time) -> None:
        self._token = token.strip()
        self._scope = scope
        self._clock = clock

    @property
    def cache_key(self) -> tuple[str, str]:
        return ("static", self._scope)

    async def acquire(self) -> Credential:
        if not self._token:
            raise AuthenticationError("Failed to authenticate: static token is empty")
        return Credential(token=self._token, expires_on=int(self._clock()) + _NOMINAL_LIFETIME_SECONDS)


__all__ = ["StaticTokenProvider"]
