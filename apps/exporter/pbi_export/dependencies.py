"""Dependency wiring from settings."""

from __future__ import annotations

import json

import httpx
from pydantic import ValidationError

from pbi_export.adapters.auth import (
    CachingTokenProvider,
    ClientCredentialsTokenProvider,
    StaticTokenProvider,
    TokenProvider,
)
from pbi_export.adapters.powerbi import PowerBIRestClient
from pbi_export.core.config import Settings
from pbi_export.errors import ConfigurationError
from pbi_export.schemas.export import ExportRequest, PowerBIReportConfiguration
from pbi_export.services.exports import ExportService, PollingPolicy


def get_token_provider(settings: Settings) -> TokenProvider:
    """Resolve provider adapter from configuration, wrapped in a credential cache."""
    if settings.auth_provider == "static":
        inner: TokenProvider = StaticTokenProvider(settings.static_token or "", scope=settings.scope)
    else:
        inner = ClientCredentialsTokenProvider(
            tenant_id=settings.tenant_id,
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            scope=settings.scope,
            authority_host=settings.authority_host,
        )
    return CachingTokenProvider(inner, refresh_margin_seconds=settings.token_refresh_margin_seconds)


def get_http_client(settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.request_timeout_seconds, transport=transport)


def get_polling_policy(settings: Settings) -> PollingPolicy:
    return PollingPolicy(
        interval_seconds=settings.polling_interval_seconds,
        max_wait_seconds=settings.max_wait_time_minutes * 60,
        status_retry_attempts=settings.status_retry_attempts,
        status_retry_wait_seconds=settings.status_retry_wait_seconds,
    )


def get_export_service(
    settings: Settings,
    *,
    http_client: httpx.AsyncClient,
    token_provider: TokenProvider,
) -> ExportService:
    rest_client = PowerBIRestClient(
        http_client,
        base_url=settings.base_url,
        group_id=settings.group_id,
        report_id=settings.report_id,
    )
    return ExportService(
        rest_client=rest_client,
        token_provider=token_provider,
        policy=get_polling_policy(settings),
    )


def build_export_request(settings: Settings) -> ExportRequest:
    """Build the ExportTo body from the configured format and optional config file."""
    report_configuration = None
    if settings.report_configuration_file is not None:
        path = settings.report_configuration_file
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            report_configuration = PowerBIReportConfiguration.model_validate(raw)
        except (OSError, ValueError, ValidationError) as exc:
            raise ConfigurationError([f"report_configuration_file '{path}' is not usable: {exc}"]) from exc

    return ExportRequest(format=settings.export_format, power_bi_report_configuration=report_configuration)
