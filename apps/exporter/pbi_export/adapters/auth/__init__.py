"""Token provider adapters."""

from .base import TokenProvider
from .cache import CachingTokenProvider
from .client_credentials import ClientCredentialsTokenProvider
from .static_token import StaticTokenProvider

__all__ = [
    "CachingTokenProvider",
    "ClientCredentialsTokenProvider",
    "StaticTokenProvider",
    "TokenProvider",
]
