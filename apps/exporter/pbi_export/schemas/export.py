"""Export request schemas serialized to the ExportTo body."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ExportFormat(str, Enum):
    PDF = "PDF"
    PPTX = "PPTX"
    PNG = "PNG"

    @property
    def file_extension(self) -> str:
        return self.value.lower()


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ReportFilter(_WireModel):
    filter: str


class PageBookmark(_WireModel):
    name: str | None = None
    state: str | None = None


class ExportReportPage(_WireModel):
    page_name: str
    visual_name: str | None = None
    bookmark: PageBookmark | None = None


class EffectiveIdentity(_WireModel):
    """Row-level-security principal applied while rendering."""

    username: str
    roles: list[str] | None = None
    datasets: list[str] | None = None


class PowerBIReportConfiguration(_WireModel):
    report_level_filters: list[ReportFilter] | None = None
    pages: list[ExportReportPage] | None = None
    identities: list[EffectiveIdentity] | None = None


class ExportRequest(_WireModel):
    format: ExportFormat
    power_bi_report_configuration: PowerBIReportConfiguration | None = Field(
        default=None,
        alias="powerBIReportConfiguration",
    )

    @field_validator("format", mode="before")
    @classmethod
    def _normalize_format(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    def to_wire(self) -> dict[str, Any]:
        """Return the camelCase JSON body, omitting unset optional values."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
