"""Token provider adapter tests."""

from __future__ import annotations

import asyncio
import unittest
from unittest.mock import patch

from azure.core.credentials import AccessToken
from azure.core.exceptions import ClientAuthenticationError, ServiceRequestError

from pbi_export.adapters.auth import (
    CachingTokenProvider,
    ClientCredentialsTokenProvider,
    StaticTokenProvider,
    TokenProvider,
)
from pbi_export.errors import AuthenticationError
from pbi_export.schemas.auth import Credential

_SCOPE = "https://analysis.windows.net/powerbi/api/.default"


def _client_credentials_provider() -> ClientCredentialsTokenProvider:
    return ClientCredentialsTokenProvider(
        tenant_id="tenant-1",
        client_id="client-1",
        client_secret="secret-1",
        scope=_SCOPE,
        authority_host="login.microsoftonline.com",
    )


class ClientCredentialsTokenProviderTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        patcher = patch("pbi_export.adapters.auth.client_credentials.ClientSecretCredential")
        self.credential_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.credential = self.credential_cls.return_value

    async def test_acquire_returns_token_for_configured_scope(self) -> None:
        self.credential.get_token.return_value = AccessToken("issued-token", 1_900_000_000)
        provider = _client_credentials_provider()

        credential = await provider.acquire()

        self.assertEqual(credential.token, "issued-token")
        self.assertEqual(credential.expires_on, 1_900_000_000)
        self.assertEqual(credential.authorization_header, "Bearer issued-token")
        self.credential.get_token.assert_called_once_with(_SCOPE)
        self.credential_cls.assert_called_once_with(
            tenant_id="tenant-1",
            client_id="client-1",
            client_secret="secret-1",
            authority="login.microsoftonline.com",
        )
        self.assertEqual(provider.cache_key, ("client-1", _SCOPE))

    async def test_identity_provider_rejection_is_an_authentication_error(self) -> None:
        rejection = ClientAuthenticationError(message="AADSTS7000215: Invalid client secret provided.")
        self.credential.get_token.side_effect = rejection

        with self.assertRaises(AuthenticationError) as context:
            await _client_credentials_provider().acquire()

        self.assertEqual(
            str(context.exception),
            "Failed to authenticate: AADSTS7000215: Invalid client secret provided.",
        )
        self.assertIs(context.exception.__cause__, rejection)

    async def test_identity_network_failure_is_an_authentication_error(self) -> None:
        self.credential.get_token.side_effect = ServiceRequestError(message="Name or service not known")

        with self.assertRaises(AuthenticationError):
            await _client_credentials_provider().acquire()

    async def test_unexpected_errors_propagate_unchanged(self) -> None:
        self.credential.get_token.side_effect = RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            await _client_credentials_provider().acquire()

    async def test_close_releases_credential(self) -> None:
        provider = _client_credentials_provider()

        await provider.close()

        self.credential.close.assert_called_once_with()

    def test_token_is_not_part_of_credential_repr(self) -> None:
        credential = Credential(token="very-secret-token", expires_on=1)

        self.assertNotIn("very-secret-token", repr(credential))


class _ScriptedProvider(TokenProvider):
    def __init__(self, clock: "_Clock", lifetime: int = 3600) -> None:
        self.calls = 0
        self.closed = False
        self._clock = clock
        self._lifetime = lifetime

    @property
    def cache_key(self) -> tuple[str, str]:
        return ("client-1", _SCOPE)

    async def acquire(self) -> Credential:
        self.calls += 1
        await asyncio.sleep(0)
        return Credential(token=f"token-{self.calls}", expires_on=int(self._clock()) + self._lifetime)

    async def close(self) -> None:
        self.closed = True


class _Clock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class CachingTokenProviderTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.clock = _Clock()
        self.inner = _ScriptedProvider(self.clock)
        self.provider = CachingTokenProvider(self.inner, refresh_margin_seconds=300, clock=self.clock)

    async def test_fresh_token_is_served_from_cache(self) -> None:
        first = await self.provider.acquire()
        self.clock.now += 3000
        second = await self.provider.acquire()

        self.assertEqual(first.token, "token-1")
        self.assertEqual(second.token, "token-1")
        self.assertEqual(self.inner.calls, 1)

    async def test_token_inside_refresh_margin_is_reacquired(self) -> None:
        await self.provider.acquire()
        self.clock.now += 3301

        credential = await self.provider.acquire()

        self.assertEqual(credential.token, "token-2")
        self.assertEqual(self.inner.calls, 2)

    async def test_concurrent_acquires_share_one_refresh(self) -> None:
        credentials = await asyncio.gather(*(self.provider.acquire() for _ in range(5)))

        self.assertEqual({c.token for c in credentials}, {"token-1"})
        self.assertEqual(self.inner.calls, 1)

    async def test_invalidate_forces_reacquire(self) -> None:
        await self.provider.acquire()
        self.provider.invalidate()

        credential = await self.provider.acquire()

        self.assertEqual(credential.token, "token-2")

    async def test_cache_key_and_close_delegate_to_inner_provider(self) -> None:
        self.assertEqual(self.provider.cache_key, ("client-1", _SCOPE))

        await self.provider.close()

        self.assertTrue(self.inner.closed)


class StaticTokenProviderTests(unittest.IsolatedAsyncioTestCase):
    async def test_returns_configured_token_with_nominal_expiry(self) -> None:
        provider = StaticTokenProvider(" local-token ", clock=lambda: 100.0)

        credential = await provider.acquire()

        self.assertEqual(credential.token, "local-token")
        self.assertEqual(credential.expires_on, 3700)

    async def test_empty_token_is_an_authentication_error(self) -> None:
        with self.assertRaises(AuthenticationError):
            await StaticTokenProvider("   ").acquire()


if __name__ == "__main__":
    unittest.main()
