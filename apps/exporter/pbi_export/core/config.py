"""Exporter configuration."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from pbi_export.errors import ConfigurationError
from pbi_export.schemas.export import ExportFormat


class Settings(BaseSettings):
    """Runtime configuration.

    Sources, highest priority first: constructor arguments, environment variables,
    ``.env``, then ``appsettings.json`` in the working directory.
    """

    tenant_id: str = ""
    client_id: str = ""
    client_secret: str = ""
    scope: str = "https://analysis.windows.net/powerbi/api/.default"
    authority_host: str = "login.microsoftonline.com"
    base_url: str = "https://api.powerbi.com/v1.0/myorg"
    group_id: str = ""
    report_id: str = ""

    auth_provider: Literal["client_credentials", "static"] = "client_credentials"
    static_token: str | None = None
    token_refresh_margin_seconds: int = 300

    export_format: str = "PDF"
    polling_interval_seconds: float = 5
    max_wait_time_minutes: float = 10
    output_directory: Path = Path("./exports")
    report_configuration_file: Path | None = None

    request_timeout_seconds: float = 100
    status_retry_attempts: int = 3
    status_retry_wait_seconds: float = 1.0

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="PBI_EXPORT_",
        env_file=".env",
        json_file="appsettings.json",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def validate_settings(settings: Settings) -> None:
    """Collect every configuration problem and raise them together."""
    problems: list[str] = []

    if settings.auth_provider == "client_credentials":
        if not settings.tenant_id.strip():
            problems.append("tenant_id is required")
        if not settings.client_id.strip():
            problems.append("client_id is required")
        if not settings.client_secret.strip():
            problems.append("client_secret is required")
    elif not (settings.static_token or "").strip():
        problems.append("static_token is required when auth_provider is 'static'")

    if not settings.group_id.strip():
        problems.append("group_id is required")
    if not settings.report_id.strip():
        problems.append("report_id is required")
    if not settings.base_url.strip():
        problems.append("base_url is required")

    supported = [f.value for f in ExportFormat]
    if settings.export_format.strip().upper() not in supported:
        problems.append(
            f"export_format '{settings.export_format}' is not valid. Supported formats: {', '.join(supported)}"
        )

    if settings.polling_interval_seconds <= 0:
        problems.append("polling_interval_seconds must be positive")
    if settings.max_wait_time_minutes <= 0:
        problems.append("max_wait_time_minutes must be positive")
    if settings.status_retry_attempts < 1:
        problems.append("status_retry_attempts must be at least 1")

    if problems:
        raise ConfigurationError(problems)
