"""OAuth2 client-credentials token provider backed by azure-identity."""

from __future__ import annotations

import asyncio
import logging

from azure.core.exceptions import AzureError
from azure.identity import ClientSecretCredential

from pbi_export.adapters.auth.base import TokenProvider
from pbi_export.core.logging_safety import safe_log_identifier
from pbi_export.errors import AuthenticationError
from pbi_export.schemas.auth import Credential

logger = logging.getLogger(__name__)


class ClientCredentialsTokenProvider(TokenProvider):
    """Acquires app-only tokens from ``https://<authority_host>/<tenant_id>``."""

    def __init__(
        self,
        *,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        scope: str,
        authority_host: str,
    ) -> None:
        self._client_id = client_id
        self._scope = scope
        self._credential = ClientSecretCredential(
            tenant_id=tenant_id,
            client_id=client_id,
            client_secret=client_secret,
            authority=authority_host,
        )

    @property
    def cache_key(self) -> tuple[str, str]:
        return (self._client_id, self._scope)

    async def acquire(self) -> Credential:
        safe_client_id = safe_log_identifier(self._client_id, prefix="client")
        logger.info("auth.acquiring client_id=%s scope=%s", safe_client_id, self._scope)

        try:
            # get_token blocks on the identity endpoint.
            access_token = await asyncio.to_thread(self._credential.get_token, self._scope)
        except AzureError as exc:
            logger.error("auth.failed client_id=%s reason=%s", safe_client_id, type(exc).__name__)
            raise AuthenticationError(f"Failed to authenticate: {exc.message or exc}") from exc

        logger.info("auth.acquired client_id=%s expires_on=%s", safe_client_id, access_token.expires_on)
        return Credential(token=access_token.token, expires_on=int(access_token.expires_on))

    async def close(self) -> None:
        self._credential.close()


__all__ = ["ClientCredentialsTokenProvider"]
