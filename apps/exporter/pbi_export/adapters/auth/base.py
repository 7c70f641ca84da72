"""Token provider interfaces."""

from abc import ABC, abstractmethod

from pbi_export.schemas.auth import Credential


class TokenProvider(ABC):
    """Provider-neutral bearer credential source."""

    @property
    @abstractmethod
    def cache_key(self) -> tuple[str, str]:
        """Identity of the credentials this provider issues, as (client id, scope)."""

    @abstractmethod
    async def acquire(self) -> Credential:
        """Return a bearer credential for the configured scope."""

    def invalidate(self) -> None:
        """Drop any cached credentials so the next acquire fetches a new one."""

    async def close(self) -> None:
        """Release provider resources."""


__all__ = ["TokenProvider"]
